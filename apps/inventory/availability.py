"""Availability checker for quoted components.

Compares each entry of a quote's frozen component list against the current
state of its inventory record. The checker only reads; reserving capacity is
done by ``apps.inventory.reservations`` inside the booking transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Protocol

from .sources import get_inventory_source

logger = logging.getLogger(__name__)


class ComponentRequest(Protocol):
    """What the checker needs from a quoted component entry."""

    component_type: str
    component_id: Any
    quantity: int


@dataclass(frozen=True)
class ComponentAvailability:
    """Result for one quoted entry."""

    component_type: str
    component_id: str
    available: bool
    requested: int
    available_quantity: int
    component_name: str
    shortfall: str = ""

    @property
    def key(self) -> str:
        return f"{self.component_type}_{self.component_id}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "available": self.available,
            "requested": self.requested,
            "availableQuantity": self.available_quantity,
            "componentName": self.component_name,
        }


@dataclass(frozen=True)
class AvailabilityReport:
    components: tuple[ComponentAvailability, ...]

    @property
    def all_available(self) -> bool:
        return all(item.available for item in self.components)

    @property
    def unavailable_components(self) -> list[str]:
        return [item.shortfall for item in self.components if not item.available]

    def as_snapshot(self) -> dict[str, dict[str, Any]]:
        """Map ``"<type>_<id>"`` to the per-entry result; later duplicates win."""
        return {item.key: item.to_dict() for item in self.components}

    def summary(self) -> str:
        return "Some components are no longer available: " + ", ".join(self.unavailable_components)


def check_component(entry: ComponentRequest) -> ComponentAvailability:
    requested = int(entry.quantity)
    component_id = str(entry.component_id)
    source = get_inventory_source(entry.component_type)

    if source is None:
        return ComponentAvailability(
            component_type=str(entry.component_type),
            component_id=component_id,
            available=False,
            requested=requested,
            available_quantity=0,
            component_name="Unknown",
            shortfall=f"{entry.component_type}: Unknown (unsupported component type)",
        )

    record = source.fetch(entry.component_id)
    name = source.display_name(record)
    available_quantity = source.remaining(record) if record is not None else 0

    if source.counted:
        available = available_quantity >= requested
        shortfall = f"{source.plural_label}: {name} (requested: {requested}, available: {available_quantity})"
    else:
        available = available_quantity > 0
        shortfall = f"{source.plural_label}: {name} (no longer available)"

    return ComponentAvailability(
        component_type=str(source.component_type),
        component_id=component_id,
        available=available,
        requested=requested,
        available_quantity=available_quantity,
        component_name=f"{source.singular_label}: {name}",
        shortfall="" if available else shortfall,
    )


def check_component_availability(entries: Iterable[ComponentRequest]) -> AvailabilityReport:
    """Check every entry; never writes."""
    report = AvailabilityReport(components=tuple(check_component(entry) for entry in entries))
    if not report.all_available:
        logger.info(f"Availability shortfall: {report.unavailable_components}")
    return report
