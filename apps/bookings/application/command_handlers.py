"""
Booking Command Handlers

Use cases that change bookings. Each runs inside one DjangoUnitOfWork,
so every write of a command commits or rolls back together, and the
domain events it records are published only after commit.

Commands:
- CreateBookingFromQuoteCommand: Turn a quote into a booking
- UpdateBookingStatusCommand: Move a booking through its lifecycle
- MarkDepositPaidCommand: Record the deposit on the header and its payment row
- MarkPaymentPaidCommand: Record a scheduled payment as received
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
import logging

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import coerce_uuid
from shared.infrastructure.db import lock_queryset_if_possible
from apps.users.scope import TeamScope
from apps.inventory.availability import AvailabilityReport, check_component_availability
from apps.inventory.reservations import release_components, reserve_components
from apps.inventory.sources import get_inventory_source
from apps.quotes import services as quote_store
from apps.quotes.domain.snapshot import SelectedComponent, normalize_selected_components, payment_schedule_from_quote
from apps.bookings.activity import ActivityLogger, ActivityType, activity_logger
from apps.bookings.domain.entities import (
    BookingStatus,
    FlightDetails,
    GuestTraveler,
    LeadTraveler,
    LoungePassDetails,
    PaymentInstruction,
)
from apps.bookings.domain.errors import (
    BookingAlreadyExistsError,
    BookingNotFoundError,
    BookingPersistenceError,
    ComponentsUnavailableError,
    InvalidStatusTransitionError,
    PaymentNotFoundError,
    UnknownBookingStatusError,
)
from apps.bookings.domain.events import BookingCreated, BookingStatusChanged, DepositMarkedPaid, PaymentMarkedPaid
from apps.bookings.models import REFERENCE_ATTEMPTS, Booking, BookingComponent, BookingPayment, BookingTraveler

logger = logging.getLogger(__name__)

DEFAULT_FLIGHT_STATUS = 'Booked - Not Ticketed'


# ===== Commands =====

@dataclass
class CreateBookingFromQuoteCommand:
    """
    Command to turn a quote into a booking

    ``adjusted_payment_schedule`` replaces the quote's schedule when given
    (an empty list means no payments). ``flights`` and ``lounge_passes``
    are matched by position to the quote's flight and lounge pass entries.
    """
    scope: TeamScope
    quote_id: Any
    lead_traveler: LeadTraveler
    guest_travelers: List[GuestTraveler] = field(default_factory=list)
    adjusted_payment_schedule: Optional[List[PaymentInstruction]] = None
    booking_notes: str = ''
    internal_notes: str = ''
    special_requests: str = ''
    deposit_paid: bool = False
    deposit_reference: str = ''
    flights: List[FlightDetails] = field(default_factory=list)
    lounge_passes: List[LoungePassDetails] = field(default_factory=list)


@dataclass
class UpdateBookingStatusCommand:
    scope: TeamScope
    booking_id: Any
    status: str
    notes: Optional[str] = None


@dataclass
class MarkDepositPaidCommand:
    scope: TeamScope
    booking_id: Any
    reference: str = ''


@dataclass
class MarkPaymentPaidCommand:
    scope: TeamScope
    booking_id: Any
    payment_number: int
    reference: str = ''


def get_team_booking(scope: TeamScope, booking_id: Any, *, lock: bool = False) -> Booking:
    """Load a booking of the caller's team or raise BookingNotFoundError."""
    pk = coerce_uuid(booking_id)
    if pk is None:
        raise BookingNotFoundError(booking_id)
    queryset = Booking.objects.filter(pk=pk, team_id=scope.team_id)
    if lock:
        queryset = lock_queryset_if_possible(queryset)
    booking = queryset.first()
    if booking is None:
        raise BookingNotFoundError(booking_id)
    return booking


# ===== Command Handlers =====

class CreateBookingFromQuoteHandler:
    """
    Handler for CreateBookingFromQuote command

    Strategy:
    1. Start database transaction (atomic)
    2. Load the quote with SELECT FOR UPDATE, scoped to the caller's team
    3. Refuse if the quote already has a booking
    4. Check availability of every quoted component
    5. Consume counted capacity with guarded updates
    6. Insert header, components, payments and travelers
    7. Log booking_created and mark the quote confirmed
    8. Commit, then publish BookingCreated

    The one-to-one Booking.quote column is the final guard against two
    concurrent conversions of the same quote.
    """

    def __init__(self, activity: Optional[ActivityLogger] = None, check_availability=None):
        self.activity = activity or activity_logger
        self.check_availability = check_availability or check_component_availability

    def handle(self, command: CreateBookingFromQuoteCommand) -> Any:
        """
        Returns: id of the created booking

        Raises:
            NotAuthenticatedError / AccessDeniedError: no user or no team
            QuoteNotFoundError: quote missing or owned by another team
            BookingAlreadyExistsError: the quote already has a booking
            ComponentsUnavailableError: a component can no longer be supplied
            BookingPersistenceError: a write failed; nothing was saved
        """
        scope = command.scope.require()
        logger.info(f"Creating booking from quote {command.quote_id} for team {scope.team_id}")

        with DjangoUnitOfWork() as uow:
            quote = quote_store.get_quote(scope, command.quote_id, lock=True)

            if self._quote_already_booked(quote.id):
                raise BookingAlreadyExistsError(quote.id)

            if quote.status != quote.Status.ACCEPTED:
                logger.warning(f"Quote {quote.id} is '{quote.status}', not accepted; booking it anyway")

            components = normalize_selected_components(quote.selected_components)
            report = self.check_availability(components)
            if not report.all_available:
                raise ComponentsUnavailableError(report)

            failed = reserve_components(components)
            if failed:
                raise ComponentsUnavailableError(self._shortfall_report(failed, report))

            quote_schedule = [
                PaymentInstruction(entry.payment_type, entry.amount, entry.due_date, entry.notes)
                for entry in payment_schedule_from_quote(quote)
            ]
            schedule = (
                quote_schedule if command.adjusted_payment_schedule is None
                else list(command.adjusted_payment_schedule)
            )

            booking = self._create_header(command, scope, quote, components, report, quote_schedule, schedule)
            self._create_components(booking, components, command.flights, command.lounge_passes)
            self._create_payments(booking, schedule, command.deposit_paid, command.deposit_reference)
            self._create_travelers(booking, command.lead_traveler, command.guest_travelers)

            self.activity.log(booking.id, ActivityType.BOOKING_CREATED, 'Booking created from quote', scope.user_id)

            try:
                quote_store.mark_quote_confirmed(quote)
            except DatabaseError as e:
                raise BookingPersistenceError('quote', e) from e

            uow.record(BookingCreated(
                aggregate_id=booking.id,
                booking_id=booking.id,
                quote_id=quote.id,
                team_id=scope.team_id,
                booking_reference=booking.booking_reference,
                total_cost=booking.total_cost,
                currency=booking.currency,
            ))

        logger.info(
            f"Booking {booking.booking_reference} ({booking.id}) created from quote {quote.id}, "
            f"total {booking.total_cost} {booking.currency}"
        )
        return booking.id

    @staticmethod
    def _quote_already_booked(quote_id) -> bool:
        return Booking.objects.filter(quote_id=quote_id).exists()

    def _shortfall_report(self, failed: Sequence[SelectedComponent], report: AvailabilityReport) -> AvailabilityReport:
        # Capacity taken earlier in this transaction counts against the failed entries
        shortfall = self.check_availability(failed)
        return shortfall if not shortfall.all_available else report

    def _create_header(self, command, scope, quote, components, report, quote_schedule, schedule) -> Booking:
        deposit_amount = next((p.amount for p in schedule if p.payment_type == 'deposit'), None)
        now = timezone.now()
        booking = Booking(
            quote=quote,
            team_id=scope.team_id,
            created_by_id=scope.user_id,
            status=Booking.Status.PENDING,
            client_id=quote.client_id,
            lead_traveler_name=command.lead_traveler.full_name,
            lead_traveler_email=command.lead_traveler.email,
            lead_traveler_phone=command.lead_traveler.phone,
            event_id=quote.event_id,
            event_name=quote.event_name,
            package_id=quote.package_id,
            package_name=quote.package_name,
            tier_id=quote.tier_id,
            tier_name=quote.tier_name,
            total_cost=quote.total_price,
            currency=quote.currency or settings.BOOKING_DEFAULT_CURRENCY,
            original_payment_schedule=[p.to_dict() for p in quote_schedule],
            adjusted_payment_schedule=[p.to_dict() for p in schedule],
            selected_components=quote.selected_components,
            component_availability=report.as_snapshot(),
            deposit_amount=deposit_amount,
            deposit_paid=command.deposit_paid,
            deposit_paid_at=now if command.deposit_paid else None,
            deposit_reference=command.deposit_reference if command.deposit_paid else '',
            booking_notes=command.booking_notes,
            internal_notes=command.internal_notes,
            special_requests=command.special_requests,
        )
        for attempt in range(1, REFERENCE_ATTEMPTS + 1):
            try:
                with transaction.atomic():
                    booking.save(force_insert=True)
                return booking
            except IntegrityError as e:
                if Booking.objects.filter(quote_id=quote.id).exists():
                    raise BookingAlreadyExistsError(quote.id) from e
                clash = Booking.objects.filter(booking_reference=booking.booking_reference).exists()
                if not clash or attempt == REFERENCE_ATTEMPTS:
                    raise BookingPersistenceError('booking', e) from e
                logger.warning(f"Booking reference {booking.booking_reference} is taken, generating another")
                booking.booking_reference = Booking.generate_booking_reference()
            except DatabaseError as e:
                raise BookingPersistenceError('booking', e) from e

    def _create_components(self, booking, components, flights, lounge_passes):
        form_details = self._match_form_details(components, flights, lounge_passes)
        captured_at = timezone.now().isoformat()
        rows = []
        for position, component in enumerate(components):
            source = get_inventory_source(component.component_type)
            record = source.fetch(component.component_id) if source else None
            details = form_details.get(position)

            component_data: Dict[str, Any] = dict(component.data)
            component_data['source_record'] = source.snapshot(record) if source else None
            component_data['captured_at'] = captured_at
            supplier_ref = ''
            booking_notes = ''
            if isinstance(details, FlightDetails):
                supplier_ref = details.booking_ref
                booking_notes = details.notes
                component_data['ticketing_deadline'] = (
                    details.ticketing_deadline.isoformat() if details.ticketing_deadline else None
                )
                component_data['flight_status'] = details.flight_status or DEFAULT_FLIGHT_STATUS
            elif isinstance(details, LoungePassDetails):
                supplier_ref = details.booking_ref
                booking_notes = details.notes
            elif component.component_type == 'flight':
                component_data['flight_status'] = DEFAULT_FLIGHT_STATUS

            name = component.name
            if not name and source is not None:
                name = f"{source.singular_label}: {source.display_name(record)}"

            rows.append(BookingComponent(
                booking=booking,
                position=position,
                component_type=component.component_type,
                component_id=component.component_id,
                component_name=name or component.component_type,
                quantity=component.quantity,
                unit_price=component.unit_price,
                total_price=component.line_total,
                component_data=component_data,
                component_snapshot=component.raw,
                supplier_ref=supplier_ref or '',
                booking_notes=booking_notes or '',
            ))
        try:
            with transaction.atomic():
                BookingComponent.objects.bulk_create(rows)
        except DatabaseError as e:
            raise BookingPersistenceError('components', e) from e

    @staticmethod
    def _match_form_details(components, flights, lounge_passes) -> Dict[int, Any]:
        """Pair the n-th flight/lounge pass entry with the n-th form entry of that type"""
        remaining = {'flight': list(flights or []), 'lounge_pass': list(lounge_passes or [])}
        matched: Dict[int, Any] = {}
        for position, component in enumerate(components):
            queue = remaining.get(component.component_type)
            if queue:
                matched[position] = queue.pop(0)
        return matched

    def _create_payments(self, booking, schedule, deposit_paid, deposit_reference):
        now = timezone.now()
        rows = []
        for number, payment in enumerate(schedule, start=1):
            paid = deposit_paid and payment.payment_type == 'deposit'
            rows.append(BookingPayment(
                booking=booking,
                payment_number=number,
                payment_type=payment.payment_type,
                amount=payment.amount,
                due_date=payment.due_date,
                notes=payment.notes,
                paid=paid,
                paid_at=now if paid else None,
                reference=deposit_reference if paid else '',
            ))
        try:
            with transaction.atomic():
                BookingPayment.objects.bulk_create(rows)
        except DatabaseError as e:
            raise BookingPersistenceError('payments', e) from e

    def _create_travelers(self, booking, lead: LeadTraveler, guests: Sequence[GuestTraveler]):
        rows = [BookingTraveler(
            booking=booking,
            traveler_number=1,
            traveler_type=BookingTraveler.TravelerType.LEAD,
            first_name=lead.first_name,
            last_name=lead.last_name,
            email=lead.email,
            phone=lead.phone,
            address=dict(lead.address),
        )]
        for number, guest in enumerate(guests, start=2):
            rows.append(BookingTraveler(
                booking=booking,
                traveler_number=number,
                traveler_type=BookingTraveler.TravelerType.GUEST,
                first_name=guest.first_name,
                last_name=guest.last_name,
                email=guest.email,
                phone=guest.phone,
                date_of_birth=guest.date_of_birth,
                passport_number=guest.passport_number,
                nationality=guest.nationality,
                dietary_restrictions=guest.dietary_restrictions,
                accessibility_needs=guest.accessibility_needs,
                special_requests=guest.special_requests,
            ))
        try:
            with transaction.atomic():
                BookingTraveler.objects.bulk_create(rows)
        except DatabaseError as e:
            raise BookingPersistenceError('travelers', e) from e


class UpdateBookingStatusHandler:
    """
    Handler for UpdateBookingStatus command

    Transitions outside ALLOWED_TRANSITIONS are accepted unless
    BOOKING_ENFORCE_STATUS_TRANSITIONS is on. The first cancellation gives the
    counted inventory back and stamps inventory_released_at; moving a released
    booking to any other status reserves that inventory again, and fails with
    ComponentsUnavailableError when it has been sold in the meantime.
    """

    def __init__(self, activity: Optional[ActivityLogger] = None):
        self.activity = activity or activity_logger

    def handle(self, command: UpdateBookingStatusCommand) -> Booking:
        scope = command.scope.require()
        try:
            target = BookingStatus(command.status)
        except ValueError:
            raise UnknownBookingStatusError(command.status)

        with DjangoUnitOfWork() as uow:
            booking = get_team_booking(scope, command.booking_id, lock=True)
            current = BookingStatus(booking.status)

            if not current.can_transition_to(target):
                if settings.BOOKING_ENFORCE_STATUS_TRANSITIONS:
                    raise InvalidStatusTransitionError(current.value, target.value)
                logger.warning(
                    f"Booking {booking.id}: transition {current.value} -> {target.value} "
                    f"is outside the lifecycle table"
                )

            now = timezone.now()
            booking.status = target.value
            update_fields = ['status', 'updated_at']
            if target is BookingStatus.CONFIRMED:
                booking.confirmed_at = now
                update_fields.append('confirmed_at')
            if target is BookingStatus.CANCELLED:
                booking.cancelled_at = now
                update_fields.append('cancelled_at')
                if booking.inventory_released_at is None:
                    release_components(booking.components.all())
                    booking.inventory_released_at = now
                    update_fields.append('inventory_released_at')
            elif booking.inventory_released_at is not None:
                self._reclaim_inventory(booking)
                booking.inventory_released_at = None
                update_fields.append('inventory_released_at')
            booking.save(update_fields=update_fields)

            description = f"Booking status updated to {target.value}"
            if command.notes:
                description = f"{description}: {command.notes}"
            self.activity.log(booking.id, ActivityType.STATUS_UPDATED, description, scope.user_id)

            uow.record(BookingStatusChanged(
                aggregate_id=booking.id,
                booking_id=booking.id,
                old_status=current.value,
                new_status=target.value,
                notes=command.notes,
            ))

        logger.info(f"Booking {booking.id} status {current.value} -> {target.value}")
        return booking

    @staticmethod
    def _reclaim_inventory(booking: Booking):
        """Take back the capacity a cancellation gave away, or refuse the reopen"""
        components = list(booking.components.all())
        failed = reserve_components(components)
        if failed:
            raise ComponentsUnavailableError(check_component_availability(failed))
        logger.info(f"Booking {booking.id} reopened, inventory reserved again")


class MarkDepositPaidHandler:
    """
    Mark the deposit on the header and on the scheduled deposit payment

    Repeated calls overwrite both and log again.
    """

    def __init__(self, activity: Optional[ActivityLogger] = None):
        self.activity = activity or activity_logger

    def handle(self, command: MarkDepositPaidCommand) -> Booking:
        scope = command.scope.require()

        with DjangoUnitOfWork() as uow:
            booking = get_team_booking(scope, command.booking_id, lock=True)
            booking.deposit_paid = True
            booking.deposit_paid_at = timezone.now()
            booking.deposit_reference = command.reference or ''
            booking.save(update_fields=['deposit_paid', 'deposit_paid_at', 'deposit_reference', 'updated_at'])
            booking.payments.filter(payment_type=BookingPayment.PaymentType.DEPOSIT).update(
                paid=True,
                paid_at=booking.deposit_paid_at,
                reference=booking.deposit_reference,
            )

            description = 'Deposit marked as paid'
            if command.reference:
                description = f"{description} (Reference: {command.reference})"
            self.activity.log(booking.id, ActivityType.DEPOSIT_PAID, description, scope.user_id)

            uow.record(DepositMarkedPaid(
                aggregate_id=booking.id,
                booking_id=booking.id,
                reference=booking.deposit_reference,
            ))

        logger.info(f"Deposit marked paid for booking {booking.id}")
        return booking


class MarkPaymentPaidHandler:
    def __init__(self, activity: Optional[ActivityLogger] = None):
        self.activity = activity or activity_logger

    def handle(self, command: MarkPaymentPaidCommand) -> BookingPayment:
        scope = command.scope.require()

        with DjangoUnitOfWork() as uow:
            booking = get_team_booking(scope, command.booking_id, lock=True)
            payment = booking.payments.filter(payment_number=command.payment_number).first()
            if payment is None:
                raise PaymentNotFoundError(booking.id, command.payment_number)

            payment.paid = True
            payment.paid_at = timezone.now()
            payment.reference = command.reference or ''
            payment.save(update_fields=['paid', 'paid_at', 'reference'])

            description = (
                f"Payment {payment.payment_number} ({payment.get_payment_type_display()}) "
                f"of {payment.amount} {booking.currency} received"
            )
            if command.reference:
                description = f"{description} (Reference: {command.reference})"
            self.activity.log(booking.id, ActivityType.PAYMENT_RECEIVED, description, scope.user_id)

            uow.record(PaymentMarkedPaid(
                aggregate_id=booking.id,
                booking_id=booking.id,
                payment_number=payment.payment_number,
                reference=payment.reference,
            ))

        logger.info(f"Payment {payment.payment_number} marked paid for booking {booking.id}")
        return payment
