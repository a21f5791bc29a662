"""Per-type access to inventory tables.

Each component type maps to one ``InventorySource`` that knows how to load
the record a quote entry points at, how much of it is left, and how to
consume or give back capacity. Counted types (tickets, hotel rooms,
transfers) track a counter against a capacity column; binary types
(flights, lounge passes) are simply active or not.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.db.models.functions import Greatest  # type: ignore
from django.forms.models import model_to_dict  # type: ignore

from shared.domain.base import coerce_uuid

from .models import AirportTransfer, CircuitTransfer, ComponentType, Flight, HotelRoom, LoungePass, Ticket

logger = logging.getLogger(__name__)

# Flights and lounge passes are not seat-counted; an active one reports this.
UNLIMITED_QUANTITY = 999


class InventorySource:
    """Base class for the per-type inventory adapters."""

    component_type: str = ""
    model: type[models.Model]
    plural_label: str = ""
    singular_label: str = ""
    counted: bool = True

    def fetch(self, component_id: Any) -> Optional[models.Model]:
        pk = coerce_uuid(component_id)
        if pk is None:
            return None
        return self.model.objects.filter(pk=pk).first()

    def remaining(self, record: models.Model) -> int:
        raise NotImplementedError

    def display_name(self, record: Optional[models.Model]) -> str:
        if record is None:
            return "Unknown"
        return str(record)

    def consume(self, component_id: Any, quantity: int) -> bool:
        """Take ``quantity`` units; False when the record cannot supply them."""
        raise NotImplementedError

    def release(self, component_id: Any, quantity: int) -> None:
        """Give back ``quantity`` units; never drops below zero."""

    def snapshot(self, record: Optional[models.Model]) -> Optional[dict[str, Any]]:
        if record is None:
            return None
        data = model_to_dict(record)
        data["id"] = str(record.pk)
        data["remaining"] = self.remaining(record)
        return data


class CountedSource(InventorySource):
    """Capacity tracked as ``capacity_field - counter_field``."""

    capacity_field: str = ""
    counter_field: str = ""

    def remaining(self, record: models.Model) -> int:
        return getattr(record, self.capacity_field) - getattr(record, self.counter_field)

    def consume(self, component_id: Any, quantity: int) -> bool:
        pk = coerce_uuid(component_id)
        if pk is None:
            return False
        headroom = Q(**{f"{self.capacity_field}__gte": F(self.counter_field) + quantity})
        updated = (
            self.model.objects.filter(pk=pk)
            .filter(headroom)
            .update(**{self.counter_field: F(self.counter_field) + quantity})
        )
        if not updated:
            logger.info(f"No headroom to consume {quantity} x {self.component_type} {component_id}")
        return updated == 1

    def release(self, component_id: Any, quantity: int) -> None:
        pk = coerce_uuid(component_id)
        if pk is None or quantity <= 0:
            return
        self.model.objects.filter(pk=pk).update(
            **{self.counter_field: Greatest(F(self.counter_field) - quantity, 0)}
        )


class ActiveFlagSource(InventorySource):
    """Bookable while ``flag_field`` is true."""

    counted = False
    flag_field: str = ""

    def remaining(self, record: models.Model) -> int:
        return UNLIMITED_QUANTITY if getattr(record, self.flag_field) else 0

    def consume(self, component_id: Any, quantity: int) -> bool:
        pk = coerce_uuid(component_id)
        if pk is None:
            return False
        return self.model.objects.filter(pk=pk, **{self.flag_field: True}).exists()


class TicketSource(CountedSource):
    component_type = ComponentType.TICKET
    model = Ticket
    plural_label = "Tickets"
    singular_label = "Ticket"
    capacity_field = "quantity_total"
    counter_field = "quantity_reserved"


class HotelRoomSource(CountedSource):
    component_type = ComponentType.HOTEL_ROOM
    model = HotelRoom
    plural_label = "Hotel Rooms"
    singular_label = "Hotel Room"
    capacity_field = "quantity_total"
    counter_field = "quantity_reserved"

    def display_name(self, record: Optional[models.Model]) -> str:
        if record is None:
            return "Unknown"
        return record.room_type


class CircuitTransferSource(CountedSource):
    component_type = ComponentType.CIRCUIT_TRANSFER
    model = CircuitTransfer
    plural_label = "Circuit Transfers"
    singular_label = "Circuit Transfer"
    capacity_field = "coach_capacity"
    counter_field = "used"


class AirportTransferSource(CountedSource):
    component_type = ComponentType.AIRPORT_TRANSFER
    model = AirportTransfer
    plural_label = "Airport Transfers"
    singular_label = "Airport Transfer"
    capacity_field = "max_capacity"
    counter_field = "used"


class FlightSource(ActiveFlagSource):
    component_type = ComponentType.FLIGHT
    model = Flight
    plural_label = "Flights"
    singular_label = "Flight"
    flag_field = "active"


class LoungePassSource(ActiveFlagSource):
    component_type = ComponentType.LOUNGE_PASS
    model = LoungePass
    plural_label = "Lounge Pass"
    singular_label = "Lounge Pass"
    flag_field = "is_active"


INVENTORY_SOURCES: dict[str, InventorySource] = {
    source.component_type: source
    for source in (
        TicketSource(),
        HotelRoomSource(),
        CircuitTransferSource(),
        AirportTransferSource(),
        FlightSource(),
        LoungePassSource(),
    )
}


def get_inventory_source(component_type: str) -> Optional[InventorySource]:
    return INVENTORY_SOURCES.get(str(component_type))
