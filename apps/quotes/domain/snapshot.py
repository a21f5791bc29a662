"""
Quote Snapshot Mapping

Turns the JSON a quote was saved with into typed values the booking
use cases work with:
- SelectedComponent: one quoted component entry
- PaymentScheduleEntry: one scheduled payment
- QuoteBookingData: everything needed to pre-fill a booking form

Two layouts of ``selected_components`` exist. Current quotes store an
ordered list of ``{"type", "id", "name", "quantity", ...}`` entries; older
quotes store an object keyed by kind (``tickets``, ``hotels``,
``circuitTransfers``, ``airportTransfers``, ``flights``, ``loungePass``).
Both normalize to the same ordered list.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from shared.domain.base import ValueObject

PAYMENT_TYPES = ("deposit", "second_payment", "final_payment", "additional")

# (legacy key, component type, key holding the inventory id, key holding the quantity)
LEGACY_COMPONENT_KEYS = (
    ("tickets", "ticket", "id", "quantity"),
    ("hotels", "hotel_room", "roomId", "quantity"),
    ("circuitTransfers", "circuit_transfer", "id", "quantity"),
    ("airportTransfers", "airport_transfer", "id", "quantity"),
    ("flights", "flight", "id", "passengers"),
    ("lounge_passes", "lounge_pass", "id", "quantity"),
)


def to_decimal(value: Any, default: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
    if value is None or value == "":
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


def to_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _first(entry: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = entry.get(key)
        if value not in (None, ""):
            return value
    return None


def _to_quantity(value: Any) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return 1
    return quantity if quantity > 0 else 1


@dataclass(frozen=True)
class SelectedComponent(ValueObject):
    """One quoted component, as frozen in the quote."""
    component_type: str
    component_id: Optional[str]
    name: str
    quantity: int
    unit_price: Decimal
    total_price: Optional[Decimal] = None
    data: Dict[str, Any] = field(default_factory=dict, compare=False)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def key(self) -> str:
        return f"{self.component_type}_{self.component_id}"

    @property
    def line_total(self) -> Decimal:
        if self.total_price is not None:
            return self.total_price
        return self.unit_price * self.quantity

    @classmethod
    def from_entry(cls, entry: Dict[str, Any], component_type: Optional[str] = None,
                   id_key: str = "id", quantity_key: str = "quantity") -> "SelectedComponent":
        data = entry.get("data") if isinstance(entry.get("data"), dict) else {}
        component_id = _first(entry, id_key, "id")
        unit_price = to_decimal(_first(entry, "unit_price", "unitPrice", "price") or data.get("price"))
        return cls(
            component_type=component_type or str(entry.get("type", "")),
            component_id=str(component_id) if component_id is not None else None,
            name=str(_first(entry, "name", "component_name") or ""),
            quantity=_to_quantity(_first(entry, quantity_key, "quantity")),
            unit_price=unit_price,
            total_price=to_decimal(_first(entry, "total_price", "totalPrice"), default=None),
            data=dict(data),
            raw=dict(entry),
        )


def normalize_selected_components(selected: Any) -> List[SelectedComponent]:
    """Normalize either stored layout into an ordered list of entries."""
    if not selected:
        return []

    if isinstance(selected, list):
        return [SelectedComponent.from_entry(entry) for entry in selected if isinstance(entry, dict)]

    if not isinstance(selected, dict):
        return []

    components: List[SelectedComponent] = []
    for legacy_key, component_type, id_key, quantity_key in LEGACY_COMPONENT_KEYS:
        for entry in selected.get(legacy_key) or []:
            if isinstance(entry, dict):
                components.append(
                    SelectedComponent.from_entry(entry, component_type, id_key, quantity_key)
                )

    lounge_pass = selected.get("loungePass")
    if isinstance(lounge_pass, dict) and lounge_pass:
        components.append(SelectedComponent.from_entry(lounge_pass, "lounge_pass"))

    return components


@dataclass(frozen=True)
class PaymentScheduleEntry(ValueObject):
    payment_type: str
    amount: Decimal
    due_date: Optional[date] = None
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "payment_type": self.payment_type,
            "amount": str(self.amount),
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "notes": self.notes,
        }


def payment_schedule_from_quote(quote: Any) -> List[PaymentScheduleEntry]:
    """Deposit, second and final payment, in that order, as saved on the quote."""
    return [
        PaymentScheduleEntry("deposit", to_decimal(quote.payment_deposit), to_date(quote.payment_deposit_date)),
        PaymentScheduleEntry(
            "second_payment",
            to_decimal(quote.payment_second_payment),
            to_date(quote.payment_second_payment_date),
        ),
        PaymentScheduleEntry(
            "final_payment",
            to_decimal(quote.payment_final_payment),
            to_date(quote.payment_final_payment_date),
        ),
    ]


@dataclass(frozen=True)
class LeadTravelerData(ValueObject):
    first_name: str
    last_name: str
    email: str = ""
    phone: str = ""
    address: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class QuoteBookingData:
    """Pre-filled booking form data derived from a quote."""
    quote_id: Any
    lead_traveler: LeadTravelerData
    guest_count: int
    components: List[SelectedComponent]
    payments: List[PaymentScheduleEntry]
    total_price: Decimal
    currency: str
    client_id: Any = None
    team_id: Any = None
    event_id: Any = None
    event_name: str = ""
    package_id: Any = None
    package_name: str = ""
    tier_id: Any = None
    tier_name: str = ""
    internal_notes: str = ""


def split_client_name(client_name: str) -> tuple:
    """'Jane van der Berg' -> ('Jane', 'van der Berg')"""
    first, _, rest = (client_name or "").strip().partition(" ")
    return first, rest.strip()


def extract_booking_data(quote: Any, default_currency: str = "GBP") -> QuoteBookingData:
    first_name, last_name = split_client_name(quote.client_name)
    adults = quote.adults or 1
    children = quote.children or 0
    return QuoteBookingData(
        quote_id=quote.id,
        lead_traveler=LeadTravelerData(
            first_name=first_name,
            last_name=last_name,
            email=quote.client_email or "",
            phone=quote.client_phone or "",
            address=dict(quote.client_address or {}),
        ),
        guest_count=max(adults - 1 + children, 0),
        components=normalize_selected_components(quote.selected_components),
        payments=payment_schedule_from_quote(quote),
        total_price=to_decimal(quote.total_price),
        currency=quote.currency or default_currency,
        client_id=quote.client_id,
        team_id=quote.team_id,
        event_id=quote.event_id,
        event_name=quote.event_name or "",
        package_id=quote.package_id,
        package_name=quote.package_name or "",
        tier_id=quote.tier_id,
        tier_name=quote.tier_name or "",
        internal_notes=quote.internal_notes or "",
    )
