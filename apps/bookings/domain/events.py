"""
Booking Domain Events

Published through the message bus after the booking transaction commits.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass
class BookingCreated(DomainEvent):
    """
    Event: A booking was created from a quote

    Triggers:
    - Booking documents dispatch (Celery task)
    """
    booking_id: UUID
    quote_id: UUID
    team_id: UUID
    booking_reference: str
    total_cost: Decimal
    currency: str


@dataclass
class BookingStatusChanged(DomainEvent):
    """
    Event: Booking status was updated

    Triggers:
    - Booking documents dispatch when the booking is confirmed or cancelled
    """
    booking_id: UUID
    old_status: str
    new_status: str
    notes: Optional[str] = None


@dataclass
class DepositMarkedPaid(DomainEvent):
    booking_id: UUID
    reference: str


@dataclass
class PaymentMarkedPaid(DomainEvent):
    booking_id: UUID
    payment_number: int
    reference: str
