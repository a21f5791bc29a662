"""Tests for status changes and payment tracking on bookings."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.test import TestCase, override_settings

from apps.bookings.application.command_handlers import (
    MarkDepositPaidCommand,
    MarkDepositPaidHandler,
    MarkPaymentPaidCommand,
    MarkPaymentPaidHandler,
    UpdateBookingStatusCommand,
    UpdateBookingStatusHandler,
)
from apps.bookings.domain.entities import BookingStatus
from apps.bookings.domain.errors import (
    BookingNotFoundError,
    ComponentsUnavailableError,
    InvalidStatusTransitionError,
    PaymentNotFoundError,
    UnknownBookingStatusError,
)
from apps.bookings.models import Booking, BookingActivity
from apps.bookings.tests.factories import (
    component_entry,
    make_booking,
    make_flight,
    make_quote,
    make_team,
    make_ticket,
    make_user,
    scope_for,
)


class BookingLifecycleTestCase(TestCase):
    def setUp(self) -> None:
        self.team = make_team()
        self.user = make_user(self.team)
        self.scope = scope_for(self.user)
        self.ticket = make_ticket(quantity_total=10)
        self.flight = make_flight()
        quote = make_quote(
            self.team,
            components=[
                component_entry("ticket", self.ticket, 4, "450.00"),
                component_entry("flight", self.flight, 2, "210.00"),
            ],
        )
        self.booking = make_booking(self.scope, quote)

    def activities(self, activity_type: str) -> list[str]:
        return list(
            BookingActivity.objects.filter(booking=self.booking, activity_type=activity_type)
            .order_by("created_at")
            .values_list("description", flat=True)
        )


class TransitionTableTests(TestCase):
    def test_allowed_transitions(self) -> None:
        self.assertTrue(BookingStatus.PENDING.can_transition_to(BookingStatus.CONFIRMED))
        self.assertTrue(BookingStatus.CONFIRMED.can_transition_to(BookingStatus.REFUNDED))
        self.assertTrue(BookingStatus.COMPLETED.can_transition_to(BookingStatus.CANCELLED))
        self.assertFalse(BookingStatus.PENDING.can_transition_to(BookingStatus.COMPLETED))
        self.assertFalse(BookingStatus.CANCELLED.can_transition_to(BookingStatus.CONFIRMED))

    def test_terminal_statuses(self) -> None:
        self.assertTrue(BookingStatus.CANCELLED.is_terminal)
        self.assertTrue(BookingStatus.REFUNDED.is_terminal)
        self.assertFalse(BookingStatus.COMPLETED.is_terminal)


class UpdateStatusTests(BookingLifecycleTestCase):
    def update(self, status: str, notes: str | None = None) -> Booking:
        return UpdateBookingStatusHandler().handle(
            UpdateBookingStatusCommand(scope=self.scope, booking_id=self.booking.id, status=status, notes=notes)
        )

    def test_confirm_stamps_confirmed_at(self) -> None:
        booking = self.update("confirmed")

        self.assertEqual(booking.status, "confirmed")
        self.assertIsNotNone(booking.confirmed_at)
        self.assertIsNone(booking.cancelled_at)
        self.assertEqual(self.activities("status_updated"), ["Booking status updated to confirmed"])

    def test_notes_are_appended_to_activity(self) -> None:
        self.update("cancelled", notes="Client request")

        self.assertEqual(self.activities("status_updated"), ["Booking status updated to cancelled: Client request"])

    def test_cancel_releases_counted_inventory(self) -> None:
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.quantity_reserved, 4)

        booking = self.update("cancelled")

        self.assertIsNotNone(booking.cancelled_at)
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.quantity_reserved, 0)
        self.flight.refresh_from_db()
        self.assertTrue(self.flight.active)

    def test_cancelling_twice_releases_once(self) -> None:
        make_booking(self.scope, make_quote(self.team, components=[component_entry("ticket", self.ticket, 3)]))

        self.update("cancelled")
        self.update("cancelled")

        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.quantity_reserved, 3)

    def test_out_of_table_transition_is_allowed_by_default(self) -> None:
        self.update("cancelled")

        booking = self.update("confirmed")

        self.assertEqual(booking.status, "confirmed")

    def test_reopening_a_cancelled_booking_reserves_again(self) -> None:
        self.update("cancelled")
        booking = self.update("confirmed")

        self.assertIsNone(booking.inventory_released_at)
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.quantity_reserved, 4)

    def test_cancel_reopen_cancel_keeps_other_bookings_capacity(self) -> None:
        make_booking(self.scope, make_quote(self.team, components=[component_entry("ticket", self.ticket, 3)]))

        self.update("cancelled")
        self.update("confirmed")
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.quantity_reserved, 7)

        booking = self.update("cancelled")

        self.assertIsNotNone(booking.inventory_released_at)
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.quantity_reserved, 3)

    def test_reopening_fails_when_capacity_was_sold(self) -> None:
        self.update("cancelled")
        make_booking(self.scope, make_quote(self.team, components=[component_entry("ticket", self.ticket, 8)]))

        with self.assertRaises(ComponentsUnavailableError) as ctx:
            self.update("confirmed")

        self.assertEqual(len(ctx.exception.unavailable_components), 1)
        self.assertIn("(requested: 4, available: 2)", ctx.exception.unavailable_components[0])
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, "cancelled")
        self.assertIsNotNone(self.booking.inventory_released_at)
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.quantity_reserved, 8)

    @override_settings(BOOKING_ENFORCE_STATUS_TRANSITIONS=True)
    def test_out_of_table_transition_is_rejected_when_enforced(self) -> None:
        with self.assertRaises(InvalidStatusTransitionError):
            self.update("completed")

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, "pending")
        self.assertEqual(self.activities("status_updated"), [])

    def test_unknown_status(self) -> None:
        with self.assertRaises(UnknownBookingStatusError):
            self.update("archived")

    def test_booking_of_another_team(self) -> None:
        other_scope = scope_for(make_user(make_team("Monaco desk")))

        with self.assertRaises(BookingNotFoundError):
            UpdateBookingStatusHandler().handle(
                UpdateBookingStatusCommand(scope=other_scope, booking_id=self.booking.id, status="cancelled")
            )
        with self.assertRaises(BookingNotFoundError):
            UpdateBookingStatusHandler().handle(
                UpdateBookingStatusCommand(scope=self.scope, booking_id=uuid.uuid4(), status="cancelled")
            )


class DepositTests(BookingLifecycleTestCase):
    def mark(self, reference: str = "") -> Booking:
        return MarkDepositPaidHandler().handle(
            MarkDepositPaidCommand(scope=self.scope, booking_id=self.booking.id, reference=reference)
        )

    def test_mark_deposit_paid(self) -> None:
        booking = self.mark("DEP-1")

        self.assertTrue(booking.deposit_paid)
        self.assertIsNotNone(booking.deposit_paid_at)
        self.assertEqual(booking.deposit_reference, "DEP-1")
        self.assertEqual(self.activities("deposit_paid"), ["Deposit marked as paid (Reference: DEP-1)"])

    def test_deposit_payment_row_is_marked_too(self) -> None:
        booking = self.mark("DEP-1")

        deposit = booking.payments.get(payment_type="deposit")
        self.assertTrue(deposit.paid)
        self.assertEqual(deposit.paid_at, booking.deposit_paid_at)
        self.assertEqual(deposit.reference, "DEP-1")
        self.assertFalse(booking.payments.get(payment_type="second_payment").paid)

    def test_without_reference(self) -> None:
        self.mark()

        self.assertEqual(self.activities("deposit_paid"), ["Deposit marked as paid"])

    def test_marking_twice_overwrites_and_logs_again(self) -> None:
        self.mark("DEP-1")
        booking = self.mark("DEP-2")

        self.assertEqual(booking.deposit_reference, "DEP-2")
        self.assertEqual(len(self.activities("deposit_paid")), 2)


class PaymentTests(BookingLifecycleTestCase):
    def test_mark_scheduled_payment_paid(self) -> None:
        payment = MarkPaymentPaidHandler().handle(
            MarkPaymentPaidCommand(scope=self.scope, booking_id=self.booking.id, payment_number=2, reference="BACS-77")
        )

        self.assertTrue(payment.paid)
        self.assertIsNotNone(payment.paid_at)
        self.assertEqual(payment.reference, "BACS-77")
        self.assertEqual(payment.amount, Decimal("1000.00"))
        self.assertFalse(self.booking.payments.get(payment_number=1).paid)
        self.assertEqual(
            self.activities("payment_received"),
            ["Payment 2 (Second payment) of 1000.00 GBP received (Reference: BACS-77)"],
        )

    def test_unknown_payment_number(self) -> None:
        with self.assertRaises(PaymentNotFoundError):
            MarkPaymentPaidHandler().handle(
                MarkPaymentPaidCommand(scope=self.scope, booking_id=self.booking.id, payment_number=9)
            )
