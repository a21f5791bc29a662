"""Booking models for the TourDesk back office."""

from __future__ import annotations

import secrets
import string
import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_ATTEMPTS = 3


class Booking(models.Model):
    """A confirmed purchase made from exactly one quote."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        COMPLETED = "completed", _("Completed")
        REFUNDED = "refunded", _("Refunded")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking_reference = models.CharField(max_length=16, unique=True, editable=False)
    quote = models.OneToOneField(
        "quotes.Quote",
        on_delete=models.PROTECT,
        related_name="booking",
    )
    team = models.ForeignKey("users.Team", on_delete=models.CASCADE, related_name="bookings")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    client_id = models.UUIDField(null=True, blank=True)
    lead_traveler_name = models.CharField(max_length=255)
    lead_traveler_email = models.EmailField(blank=True)
    lead_traveler_phone = models.CharField(max_length=50, blank=True)

    event_id = models.UUIDField(null=True, blank=True)
    event_name = models.CharField(max_length=255, blank=True)
    package_id = models.UUIDField(null=True, blank=True)
    package_name = models.CharField(max_length=255, blank=True)
    tier_id = models.UUIDField(null=True, blank=True)
    tier_name = models.CharField(max_length=255, blank=True)

    total_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text=_("Copied from the quote at booking time; never recomputed."),
    )
    currency = models.CharField(max_length=3)
    original_payment_schedule = models.JSONField(default=list, encoder=DjangoJSONEncoder)
    adjusted_payment_schedule = models.JSONField(default=list, encoder=DjangoJSONEncoder)
    selected_components = models.JSONField(default=list, encoder=DjangoJSONEncoder)
    component_availability = models.JSONField(default=dict, encoder=DjangoJSONEncoder)

    deposit_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    deposit_paid = models.BooleanField(default=False)
    deposit_paid_at = models.DateTimeField(null=True, blank=True)
    deposit_reference = models.CharField(max_length=255, blank=True)

    booking_notes = models.TextField(blank=True)
    internal_notes = models.TextField(blank=True)
    special_requests = models.TextField(blank=True)

    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    inventory_released_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("Set while the counted capacity of this booking is given back to inventory."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "bookings"
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["team", "status"]),
            models.Index(fields=["team", "created_at"]),
        ]

    def __str__(self) -> str:
        return f"Booking {self.booking_reference} for {self.lead_traveler_name}"

    def save(self, *args, **kwargs):  # type: ignore
        if not self.booking_reference:
            self.booking_reference = self.generate_booking_reference()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_booking_reference() -> str:
        suffix = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(6))
        return f"B-{timezone.now().year}-{suffix}"


class BookingComponent(models.Model):
    """One purchased component group of a booking."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="components")
    position = models.PositiveIntegerField(default=0)
    component_type = models.CharField(max_length=32)
    component_id = models.CharField(
        max_length=64,
        blank=True,
        null=True,
        help_text=_("Id of the inventory record the quote entry pointed at."),
    )
    component_name = models.CharField(max_length=255, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    component_data = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    component_snapshot = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    supplier_ref = models.CharField(max_length=255, blank=True)
    booking_notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "booking_components"
        ordering = ["position"]

    def __str__(self) -> str:
        return f"{self.quantity} x {self.component_name or self.component_type}"


class BookingPayment(models.Model):
    class PaymentType(models.TextChoices):
        DEPOSIT = "deposit", _("Deposit")
        SECOND_PAYMENT = "second_payment", _("Second payment")
        FINAL_PAYMENT = "final_payment", _("Final payment")
        ADDITIONAL = "additional", _("Additional")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="payments")
    payment_type = models.CharField(max_length=20, choices=PaymentType.choices)
    payment_number = models.PositiveIntegerField()
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    due_date = models.DateField(null=True, blank=True)
    paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)
    reference = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "booking_payments"
        ordering = ["payment_number"]
        constraints = [
            models.UniqueConstraint(fields=["booking", "payment_number"], name="booking_payment_number_unique"),
        ]

    def __str__(self) -> str:
        return f"Payment {self.payment_number} ({self.payment_type}) of {self.booking_id}"


class BookingTraveler(models.Model):
    class TravelerType(models.TextChoices):
        LEAD = "lead", _("Lead traveler")
        GUEST = "guest", _("Guest")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="travelers")
    traveler_number = models.PositiveIntegerField()
    traveler_type = models.CharField(max_length=10, choices=TravelerType.choices)
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.JSONField(default=dict, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    passport_number = models.CharField(max_length=50, blank=True)
    nationality = models.CharField(max_length=100, blank=True)
    dietary_restrictions = models.CharField(max_length=255, blank=True)
    accessibility_needs = models.CharField(max_length=255, blank=True)
    special_requests = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "booking_travelers"
        ordering = ["traveler_number"]
        constraints = [
            models.UniqueConstraint(fields=["booking", "traveler_number"], name="booking_traveler_number_unique"),
        ]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class BookingActivity(models.Model):
    """Append-only audit entry for a booking."""

    class ActivityType(models.TextChoices):
        BOOKING_CREATED = "booking_created", _("Booking created")
        STATUS_UPDATED = "status_updated", _("Status updated")
        DEPOSIT_PAID = "deposit_paid", _("Deposit paid")
        PAYMENT_RECEIVED = "payment_received", _("Payment received")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(Booking, on_delete=models.PROTECT, related_name="activities")
    activity_type = models.CharField(max_length=32, choices=ActivityType.choices)
    description = models.TextField()
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="booking_activities",
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        db_table = "booking_activity_log"
        verbose_name_plural = _("Booking activities")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["booking", "created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.activity_type}: {self.description}"

    def save(self, *args, **kwargs):  # type: ignore
        if not self._state.adding:
            raise ValueError("Booking activity entries are append-only.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):  # type: ignore
        raise ValueError("Booking activity entries are append-only.")
