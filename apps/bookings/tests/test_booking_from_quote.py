"""Tests for turning a quote into a booking."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from apps.bookings.application.command_handlers import (
    CreateBookingFromQuoteCommand,
    CreateBookingFromQuoteHandler,
)
from apps.bookings.domain.entities import (
    FlightDetails,
    GuestTraveler,
    LeadTraveler,
    LoungePassDetails,
    PaymentInstruction,
)
from apps.bookings.domain.errors import (
    BookingAlreadyExistsError,
    BookingPersistenceError,
    ComponentsUnavailableError,
)
from apps.bookings.models import Booking, BookingActivity, BookingComponent, BookingTraveler
from apps.bookings.tests.factories import (
    component_entry,
    make_flight,
    make_hotel_room,
    make_lounge_pass,
    make_quote,
    make_team,
    make_ticket,
    make_user,
    scope_for,
)
from apps.quotes.domain.errors import QuoteNotFoundError
from apps.quotes.models import Quote
from apps.users.scope import TeamScope
from shared.domain.errors import AccessDeniedError, NotAuthenticatedError


class BookingFromQuoteTestCase(TestCase):
    def setUp(self) -> None:
        self.team = make_team()
        self.user = make_user(self.team)
        self.scope = scope_for(self.user)
        self.ticket = make_ticket(quantity_total=10, category_name="Grandstand A")
        self.room = make_hotel_room(quantity_total=5)
        self.quote = make_quote(
            self.team,
            self.user,
            components=[
                component_entry("ticket", self.ticket, 2, "450.00", name="Grandstand A"),
                component_entry("hotel_room", self.room, 1, "300.00", name="Deluxe Double"),
            ],
        )
        self.handler = CreateBookingFromQuoteHandler()

    def command(self, quote=None, **overrides) -> CreateBookingFromQuoteCommand:
        values = {
            "scope": self.scope,
            "quote_id": (quote or self.quote).id,
            "lead_traveler": LeadTraveler(first_name="Jane", last_name="Smith", email="jane@example.com"),
            "guest_travelers": [
                GuestTraveler(first_name="John", last_name="Smith"),
                GuestTraveler(first_name="Amy", last_name="Smith", date_of_birth=date(2015, 4, 2)),
            ],
        }
        values.update(overrides)
        return CreateBookingFromQuoteCommand(**values)


class CreateBookingTests(BookingFromQuoteTestCase):
    def test_two_tickets_and_one_room(self) -> None:
        booking_id = self.handler.handle(self.command())

        booking = Booking.objects.get(pk=booking_id)
        self.assertEqual(booking.status, Booking.Status.PENDING)
        self.assertEqual(booking.quote_id, self.quote.id)
        self.assertEqual(booking.team_id, self.team.id)
        self.assertEqual(booking.created_by_id, self.user.pk)
        self.assertEqual(booking.lead_traveler_name, "Jane Smith")
        self.assertRegex(booking.booking_reference, r"^B-\d{4}-[A-Z0-9]{6}$")

        components = list(booking.components.order_by("position"))
        self.assertEqual([(c.component_type, c.quantity) for c in components], [("ticket", 2), ("hotel_room", 1)])
        self.assertEqual(components[0].total_price, Decimal("900.00"))
        self.assertEqual(components[0].component_data["source_record"]["id"], str(self.ticket.pk))
        self.assertEqual(components[0].component_snapshot["name"], "Grandstand A")

        self.assertEqual(
            booking.component_availability[f"ticket_{self.ticket.pk}"],
            {"available": True, "requested": 2, "availableQuantity": 10, "componentName": "Ticket: Grandstand A"},
        )

        self.ticket.refresh_from_db()
        self.room.refresh_from_db()
        self.assertEqual(self.ticket.quantity_reserved, 2)
        self.assertEqual(self.room.quantity_reserved, 1)

    def test_total_is_copied_from_quote(self) -> None:
        booking = Booking.objects.get(pk=self.handler.handle(self.command()))

        # Component lines add up to 1200.00; the quote's price wins
        self.assertEqual(booking.total_cost, Decimal("2500.00"))
        self.assertEqual(booking.currency, "GBP")

    def test_payments_follow_quote_schedule(self) -> None:
        booking = Booking.objects.get(pk=self.handler.handle(self.command()))

        payments = list(booking.payments.order_by("payment_number"))
        self.assertEqual(
            [(p.payment_number, p.payment_type, p.amount, p.due_date) for p in payments],
            [
                (1, "deposit", Decimal("500.00"), date(2026, 1, 15)),
                (2, "second_payment", Decimal("1000.00"), date(2026, 3, 15)),
                (3, "final_payment", Decimal("1000.00"), date(2026, 5, 15)),
            ],
        )
        self.assertEqual(booking.deposit_amount, Decimal("500.00"))
        self.assertFalse(any(p.paid for p in payments))
        self.assertEqual(booking.original_payment_schedule, booking.adjusted_payment_schedule)

    def test_travelers_are_numbered_from_the_lead(self) -> None:
        booking = Booking.objects.get(pk=self.handler.handle(self.command()))

        travelers = list(booking.travelers.order_by("traveler_number"))
        self.assertEqual(
            [(t.traveler_number, t.traveler_type, t.first_name) for t in travelers],
            [(1, "lead", "Jane"), (2, "guest", "John"), (3, "guest", "Amy")],
        )
        self.assertEqual(travelers[2].date_of_birth, date(2015, 4, 2))

    def test_quote_is_confirmed_and_activity_logged(self) -> None:
        booking_id = self.handler.handle(self.command())

        self.quote.refresh_from_db()
        self.assertEqual(self.quote.status, Quote.Status.CONFIRMED)
        self.assertIsNotNone(self.quote.confirmed_at)
        activity = BookingActivity.objects.get(booking_id=booking_id)
        self.assertEqual(activity.activity_type, "booking_created")
        self.assertEqual(activity.description, "Booking created from quote")
        self.assertEqual(activity.performed_by_id, self.user.pk)

    def test_quote_that_is_not_accepted_is_still_booked(self) -> None:
        Quote.objects.filter(pk=self.quote.pk).update(status=Quote.Status.SENT)

        booking_id = self.handler.handle(self.command())

        self.assertTrue(Booking.objects.filter(pk=booking_id).exists())

    def test_legacy_component_layout(self) -> None:
        quote = make_quote(
            self.team,
            components={
                "tickets": [{"id": str(self.ticket.pk), "quantity": 3, "price": "450.00"}],
                "hotels": [{"roomId": str(self.room.pk), "quantity": 2, "price": "300.00"}],
            },
        )

        booking = Booking.objects.get(pk=self.handler.handle(self.command(quote)))

        self.assertEqual(
            [(c.component_type, c.quantity) for c in booking.components.order_by("position")],
            [("ticket", 3), ("hotel_room", 2)],
        )
        self.assertEqual(booking.components.get(component_type="hotel_room").component_name, "Hotel Room: Deluxe Double")


class PaymentScheduleOptionsTests(BookingFromQuoteTestCase):
    def test_adjusted_schedule_replaces_quote_schedule(self) -> None:
        schedule = [
            PaymentInstruction("deposit", Decimal("250.00"), date(2026, 2, 1)),
            PaymentInstruction("final_payment", Decimal("2250.00"), date(2026, 6, 1), notes="Agreed by phone"),
        ]

        booking = Booking.objects.get(pk=self.handler.handle(self.command(adjusted_payment_schedule=schedule)))

        payments = list(booking.payments.order_by("payment_number"))
        self.assertEqual([(p.payment_number, p.amount) for p in payments], [(1, Decimal("250.00")), (2, Decimal("2250.00"))])
        self.assertEqual(payments[1].notes, "Agreed by phone")
        self.assertEqual(booking.deposit_amount, Decimal("250.00"))
        self.assertEqual(len(booking.original_payment_schedule), 3)

    def test_empty_adjusted_schedule_creates_no_payments(self) -> None:
        booking = Booking.objects.get(pk=self.handler.handle(self.command(adjusted_payment_schedule=[])))

        self.assertEqual(booking.payments.count(), 0)
        self.assertIsNone(booking.deposit_amount)

    def test_deposit_paid_at_creation(self) -> None:
        booking = Booking.objects.get(
            pk=self.handler.handle(self.command(deposit_paid=True, deposit_reference="DEP-001"))
        )

        self.assertTrue(booking.deposit_paid)
        self.assertIsNotNone(booking.deposit_paid_at)
        self.assertEqual(booking.deposit_reference, "DEP-001")
        deposit = booking.payments.get(payment_number=1)
        self.assertTrue(deposit.paid)
        self.assertEqual(deposit.reference, "DEP-001")
        self.assertFalse(booking.payments.get(payment_number=2).paid)


class ComponentFormDetailsTests(BookingFromQuoteTestCase):
    def test_flight_and_lounge_details_are_matched_by_position(self) -> None:
        outbound = make_flight(number="BA123")
        other = make_flight(number="VS045")
        lounge = make_lounge_pass()
        quote = make_quote(
            self.team,
            components=[
                component_entry("flight", outbound, 2, "210.00"),
                component_entry("ticket", self.ticket, 2, "450.00"),
                component_entry("flight", other, 2, "190.00"),
                component_entry("lounge_pass", lounge, 2, "45.00"),
            ],
        )
        command = self.command(
            quote,
            flights=[
                FlightDetails(booking_ref="PNR-1", ticketing_deadline=date(2026, 4, 1), flight_status="Ticketed"),
                FlightDetails(booking_ref="PNR-2"),
            ],
            lounge_passes=[LoungePassDetails(booking_ref="LNG-9", notes="Terminal 5")],
        )

        booking = Booking.objects.get(pk=self.handler.handle(command))

        rows = {c.position: c for c in booking.components.all()}
        self.assertEqual(rows[0].supplier_ref, "PNR-1")
        self.assertEqual(rows[0].component_data["ticketing_deadline"], "2026-04-01")
        self.assertEqual(rows[0].component_data["flight_status"], "Ticketed")
        self.assertEqual(rows[1].supplier_ref, "")
        self.assertEqual(rows[2].supplier_ref, "PNR-2")
        self.assertEqual(rows[2].component_data["flight_status"], "Booked - Not Ticketed")
        self.assertEqual(rows[3].supplier_ref, "LNG-9")
        self.assertEqual(rows[3].booking_notes, "Terminal 5")

    def test_flight_without_form_details_gets_default_status(self) -> None:
        flight = make_flight()
        quote = make_quote(self.team, components=[component_entry("flight", flight, 1, "210.00")])

        booking = Booking.objects.get(pk=self.handler.handle(self.command(quote)))

        self.assertEqual(booking.components.get().component_data["flight_status"], "Booked - Not Ticketed")


class RejectedConversionTests(BookingFromQuoteTestCase):
    def test_second_booking_for_same_quote_is_rejected(self) -> None:
        self.handler.handle(self.command())

        with self.assertRaises(BookingAlreadyExistsError) as ctx:
            self.handler.handle(self.command())
        self.assertEqual(str(ctx.exception), "Booking already exists for this quote")
        self.assertEqual(Booking.objects.filter(quote=self.quote).count(), 1)
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.quantity_reserved, 2)

    def test_concurrent_conversion_is_stopped_by_unique_quote(self) -> None:
        self.handler.handle(self.command())

        with mock.patch.object(CreateBookingFromQuoteHandler, "_quote_already_booked", return_value=False):
            with self.assertRaises(BookingAlreadyExistsError) as ctx:
                self.handler.handle(self.command())

        self.assertEqual(str(ctx.exception), "Booking already exists for this quote")
        self.assertEqual(Booking.objects.filter(quote=self.quote).count(), 1)
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.quantity_reserved, 2)
        self.room.refresh_from_db()
        self.assertEqual(self.room.quantity_reserved, 1)

    def test_shortfall_writes_nothing(self) -> None:
        scarce = make_ticket(quantity_total=2, category_name="Club Corner")
        quote = make_quote(
            self.team,
            components=[
                component_entry("hotel_room", self.room, 1, "300.00"),
                component_entry("ticket", scarce, 5, "450.00"),
            ],
        )

        with self.assertRaises(ComponentsUnavailableError) as ctx:
            self.handler.handle(self.command(quote))

        self.assertEqual(
            str(ctx.exception),
            "Some components are no longer available: Tickets: Club Corner (requested: 5, available: 2)",
        )
        self.assertEqual(ctx.exception.unavailable_components, ["Tickets: Club Corner (requested: 5, available: 2)"])
        self.assertFalse(Booking.objects.exists())
        self.assertFalse(BookingActivity.objects.exists())
        quote.refresh_from_db()
        self.assertEqual(quote.status, Quote.Status.ACCEPTED)
        self.room.refresh_from_db()
        self.assertEqual(self.room.quantity_reserved, 0)

    def test_duplicate_entries_exceeding_stock_are_rejected(self) -> None:
        ticket = make_ticket(quantity_total=3, category_name="Club Corner")
        quote = make_quote(
            self.team,
            components=[component_entry("ticket", ticket, 2, "450.00"), component_entry("ticket", ticket, 2, "450.00")],
        )

        with self.assertRaises(ComponentsUnavailableError) as ctx:
            self.handler.handle(self.command(quote))

        self.assertEqual(ctx.exception.unavailable_components, ["Tickets: Club Corner (requested: 2, available: 1)"])
        ticket.refresh_from_db()
        self.assertEqual(ticket.quantity_reserved, 0)

    def test_quote_of_another_team(self) -> None:
        foreign = make_quote(make_team("Monaco desk"))

        with self.assertRaises(QuoteNotFoundError):
            self.handler.handle(self.command(foreign))

    def test_caller_without_user_or_team(self) -> None:
        with self.assertRaises(NotAuthenticatedError):
            self.handler.handle(self.command(scope=TeamScope(user_id=None, team_id=None)))
        with self.assertRaises(AccessDeniedError):
            self.handler.handle(self.command(scope=scope_for(make_user())))
        self.assertFalse(Booking.objects.exists())


class PersistenceFailureTests(BookingFromQuoteTestCase):
    def other_quote(self) -> Quote:
        return make_quote(self.team, components=[component_entry("hotel_room", self.room, 1, "300.00")])

    def test_traveler_insert_failure_rolls_everything_back(self) -> None:
        with mock.patch.object(BookingTraveler.objects, "bulk_create", side_effect=DatabaseError("disk full")):
            with self.assertRaises(BookingPersistenceError) as ctx:
                self.handler.handle(self.command())

        self.assertEqual(ctx.exception.stage, "travelers")
        self.assertEqual(str(ctx.exception), "Failed to create traveler records")
        self.assertFalse(Booking.objects.exists())
        self.assertFalse(BookingComponent.objects.exists())
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.quantity_reserved, 0)
        self.quote.refresh_from_db()
        self.assertEqual(self.quote.status, Quote.Status.ACCEPTED)

    def test_taken_booking_reference_is_regenerated(self) -> None:
        taken = Booking.objects.get(pk=self.handler.handle(self.command(self.other_quote()))).booking_reference

        with mock.patch.object(Booking, "generate_booking_reference", side_effect=[taken, "B-2026-FRESH1"]):
            booking = Booking.objects.get(pk=self.handler.handle(self.command()))

        self.assertEqual(booking.booking_reference, "B-2026-FRESH1")
        self.assertEqual(booking.quote, self.quote)

    def test_reference_clashes_give_up_after_retries(self) -> None:
        taken = Booking.objects.get(pk=self.handler.handle(self.command(self.other_quote()))).booking_reference

        with mock.patch.object(Booking, "generate_booking_reference", return_value=taken):
            with self.assertRaises(BookingPersistenceError) as ctx:
                self.handler.handle(self.command())

        self.assertEqual(ctx.exception.stage, "booking")
        self.assertFalse(Booking.objects.filter(quote=self.quote).exists())
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.quantity_reserved, 0)

    def test_quote_update_failure_rolls_everything_back(self) -> None:
        with mock.patch("apps.quotes.services.mark_quote_confirmed", side_effect=DatabaseError("locked")):
            with self.assertRaises(BookingPersistenceError) as ctx:
                self.handler.handle(self.command())

        self.assertEqual(ctx.exception.stage, "quote")
        self.assertFalse(Booking.objects.exists())

    def test_activity_failure_does_not_abort_booking(self) -> None:
        with mock.patch.object(BookingActivity.objects, "create", side_effect=DatabaseError("audit down")):
            booking_id = self.handler.handle(self.command())

        self.assertTrue(Booking.objects.filter(pk=booking_id).exists())
        self.assertFalse(BookingActivity.objects.exists())
        self.quote.refresh_from_db()
        self.assertEqual(self.quote.status, Quote.Status.CONFIRMED)
