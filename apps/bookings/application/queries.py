"""
Booking Queries

Read-only, team-scoped accessors used by the API and by back-office
screens. Nothing here writes.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, List, Optional
import logging

from django.db.models import Count, Q, Sum
from django.utils import timezone

from shared.domain.base import coerce_uuid
from apps.users.scope import TeamScope
from apps.bookings.application.command_handlers import get_team_booking
from apps.bookings.models import Booking, BookingActivity, BookingComponent, BookingPayment, BookingTraveler

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

REVENUE_STATUSES = (Booking.Status.CONFIRMED, Booking.Status.COMPLETED)


@dataclass
class BookingDetails:
    booking: Booking
    components: List[BookingComponent]
    payments: List[BookingPayment]
    travelers: List[BookingTraveler]
    activities: List[BookingActivity]


@dataclass
class BookingPage:
    bookings: List[Booking]
    total: int
    limit: int
    offset: int


@dataclass
class BookingStats:
    total_bookings: int
    pending_bookings: int
    confirmed_bookings: int
    cancelled_bookings: int
    completed_bookings: int
    refunded_bookings: int
    total_revenue: Decimal
    average_booking_value: Decimal
    this_month_bookings: int
    this_month_revenue: Decimal


class BookingQueries:
    """Read accessors bound to one caller's team"""

    def __init__(self, scope: TeamScope):
        self.scope = scope.require()

    def _bookings(self):
        return Booking.objects.filter(team_id=self.scope.team_id)

    def get_booking_by_id(self, booking_id: Any) -> Booking:
        return get_team_booking(self.scope, booking_id)

    def get_booking_by_quote_id(self, quote_id: Any) -> Optional[Booking]:
        pk = coerce_uuid(quote_id)
        if pk is None:
            return None
        return self._bookings().filter(quote_id=pk).first()

    def get_booking_details(self, booking_id: Any) -> BookingDetails:
        booking = get_team_booking(self.scope, booking_id)
        return BookingDetails(
            booking=booking,
            components=list(booking.components.order_by('position')),
            payments=list(booking.payments.order_by('payment_number')),
            travelers=list(booking.travelers.order_by('traveler_number')),
            activities=list(booking.activities.select_related('performed_by').order_by('-created_at')),
        )

    def get_team_bookings(self, status: Optional[str] = None, limit: int = DEFAULT_PAGE_SIZE,
                          offset: int = 0) -> BookingPage:
        """Newest first; ``total`` counts every matching booking, not just the page"""
        limit = max(1, min(int(limit), MAX_PAGE_SIZE))
        offset = max(0, int(offset))
        queryset = self._bookings()
        if status:
            queryset = queryset.filter(status=status)
        total = queryset.count()
        bookings = list(queryset.order_by('-created_at')[offset:offset + limit])
        return BookingPage(bookings=bookings, total=total, limit=limit, offset=offset)

    def get_booking_stats(self, today: Optional[date] = None) -> BookingStats:
        """
        Revenue counts confirmed and completed bookings only. The average is
        taken over all bookings, whatever their status. Amounts in different
        currencies are summed as they are.
        """
        today = today or timezone.localdate()
        bookings = self._bookings()

        counts = bookings.aggregate(
            total=Count('id'),
            pending=Count('id', filter=Q(status=Booking.Status.PENDING)),
            confirmed=Count('id', filter=Q(status=Booking.Status.CONFIRMED)),
            cancelled=Count('id', filter=Q(status=Booking.Status.CANCELLED)),
            completed=Count('id', filter=Q(status=Booking.Status.COMPLETED)),
            refunded=Count('id', filter=Q(status=Booking.Status.REFUNDED)),
        )
        revenue = bookings.filter(status__in=REVENUE_STATUSES).aggregate(
            total=Sum('total_cost'),
        )['total'] or Decimal('0')

        month = bookings.filter(created_at__year=today.year, created_at__month=today.month)
        this_month = month.aggregate(
            count=Count('id'),
            revenue=Sum('total_cost', filter=Q(status__in=REVENUE_STATUSES)),
        )

        total = counts['total']
        average = (revenue / total).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP) if total else Decimal('0.00')

        return BookingStats(
            total_bookings=total,
            pending_bookings=counts['pending'],
            confirmed_bookings=counts['confirmed'],
            cancelled_bookings=counts['cancelled'],
            completed_bookings=counts['completed'],
            refunded_bookings=counts['refunded'],
            total_revenue=revenue,
            average_booking_value=average,
            this_month_bookings=this_month['count'],
            this_month_revenue=this_month['revenue'] or Decimal('0'),
        )
