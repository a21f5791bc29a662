"""Inventory models for bookable travel components."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class ComponentType(models.TextChoices):
    TICKET = "ticket", _("Ticket")
    HOTEL_ROOM = "hotel_room", _("Hotel room")
    CIRCUIT_TRANSFER = "circuit_transfer", _("Circuit transfer")
    AIRPORT_TRANSFER = "airport_transfer", _("Airport transfer")
    FLIGHT = "flight", _("Flight")
    LOUNGE_PASS = "lounge_pass", _("Lounge pass")


class InventoryItem(models.Model):
    """Columns shared by every inventory table."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_id = models.UUIDField(null=True, blank=True, db_index=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="GBP")
    supplier = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Ticket(InventoryItem):
    """Event ticket allocation for one seating category."""

    category_name = models.CharField(max_length=255)
    quantity_total = models.PositiveIntegerField(default=0)
    quantity_reserved = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Ticket allocation")
        verbose_name_plural = _("Ticket allocations")
        ordering = ["category_name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_reserved__lte=models.F("quantity_total")),
                name="ticket_reserved_within_total",
            ),
        ]

    def __str__(self) -> str:
        return self.category_name

    @property
    def quantity_available(self) -> int:
        return self.quantity_total - self.quantity_reserved


class HotelRoom(InventoryItem):
    """Contracted room block at a hotel."""

    hotel_name = models.CharField(max_length=255)
    room_type = models.CharField(max_length=255)
    check_in = models.DateField(null=True, blank=True)
    check_out = models.DateField(null=True, blank=True)
    quantity_total = models.PositiveIntegerField(default=0)
    quantity_reserved = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Hotel room block")
        verbose_name_plural = _("Hotel room blocks")
        ordering = ["hotel_name", "room_type"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_reserved__lte=models.F("quantity_total")),
                name="hotel_room_reserved_within_total",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.hotel_name} - {self.room_type}"

    @property
    def quantity_available(self) -> int:
        return self.quantity_total - self.quantity_reserved


class CircuitTransfer(InventoryItem):
    """Coach seats between hotel and circuit."""

    transfer_type = models.CharField(max_length=100, blank=True)
    vehicle_name = models.CharField(max_length=255)
    coach_capacity = models.PositiveIntegerField(default=0)
    used = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Circuit transfer")
        verbose_name_plural = _("Circuit transfers")
        ordering = ["vehicle_name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(used__lte=models.F("coach_capacity")),
                name="circuit_transfer_used_within_capacity",
            ),
        ]

    def __str__(self) -> str:
        return self.vehicle_name


class AirportTransfer(InventoryItem):
    """Vehicle capacity between airport and hotel."""

    transport_type = models.CharField(max_length=100, blank=True)
    vehicle_name = models.CharField(max_length=255)
    max_capacity = models.PositiveIntegerField(default=0)
    used = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Airport transfer")
        verbose_name_plural = _("Airport transfers")
        ordering = ["vehicle_name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(used__lte=models.F("max_capacity")),
                name="airport_transfer_used_within_capacity",
            ),
        ]

    def __str__(self) -> str:
        return self.vehicle_name


class Flight(InventoryItem):
    """Flight option; bookable while active, seats are not counted."""

    airline = models.CharField(max_length=255, blank=True)
    outbound_flight_number = models.CharField(max_length=20)
    return_flight_number = models.CharField(max_length=20, blank=True)
    departure_airport = models.CharField(max_length=10, blank=True)
    arrival_airport = models.CharField(max_length=10, blank=True)
    active = models.BooleanField(default=True)

    class Meta:
        verbose_name = _("Flight")
        verbose_name_plural = _("Flights")
        ordering = ["outbound_flight_number"]

    def __str__(self) -> str:
        return self.outbound_flight_number


class LoungePass(InventoryItem):
    """Airport lounge access product; bookable while active."""

    lounge_name = models.CharField(max_length=255)
    airport_code = models.CharField(max_length=10, blank=True)
    variant = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = _("Lounge pass")
        verbose_name_plural = _("Lounge passes")
        ordering = ["lounge_name"]

    def __str__(self) -> str:
        return self.variant or self.lounge_name
