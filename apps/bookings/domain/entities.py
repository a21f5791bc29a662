"""
Booking Domain Entities

Pure values the booking use cases work with:
- BookingStatus: lifecycle states and the transition table
- LeadTraveler / GuestTraveler: traveler data captured on the booking form
- PaymentInstruction: one row of the payment schedule to create
- FlightDetails / LoungePassDetails: per-component form data
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from shared.domain.base import ValueObject


class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PENDING -> CONFIRMED (supplier bookings done, client confirmed)
    - PENDING -> CANCELLED
    - CONFIRMED -> COMPLETED (trip took place)
    - CONFIRMED -> CANCELLED
    - CONFIRMED / COMPLETED -> REFUNDED
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'
    REFUNDED = 'refunded'

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.CANCELLED, BookingStatus.REFUNDED)

    def can_transition_to(self, target: 'BookingStatus') -> bool:
        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.REFUNDED}
    ),
    BookingStatus.COMPLETED: frozenset({BookingStatus.CANCELLED, BookingStatus.REFUNDED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.REFUNDED: frozenset(),
}


@dataclass(frozen=True)
class LeadTraveler(ValueObject):
    first_name: str
    last_name: str
    email: str = ''
    phone: str = ''
    address: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class GuestTraveler(ValueObject):
    first_name: str
    last_name: str = ''
    email: str = ''
    phone: str = ''
    date_of_birth: Optional[date] = None
    passport_number: str = ''
    nationality: str = ''
    dietary_restrictions: str = ''
    accessibility_needs: str = ''
    special_requests: str = ''


@dataclass(frozen=True)
class PaymentInstruction(ValueObject):
    """One payment to schedule, in schedule order"""
    payment_type: str
    amount: Decimal
    due_date: Optional[date] = None
    notes: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'payment_type': self.payment_type,
            'amount': str(self.amount),
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'notes': self.notes,
        }


@dataclass(frozen=True)
class FlightDetails(ValueObject):
    booking_ref: str = ''
    ticketing_deadline: Optional[date] = None
    flight_status: str = ''
    notes: str = ''


@dataclass(frozen=True)
class LoungePassDetails(ValueObject):
    booking_ref: str = ''
    notes: str = ''
