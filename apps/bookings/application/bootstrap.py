"""
Wires booking commands and events into the global message bus.

Called from BookingsConfig.ready(); safe to call more than once.
"""

from shared.application.message_bus import MessageBus, message_bus
from apps.bookings.application.command_handlers import (
    CreateBookingFromQuoteCommand,
    CreateBookingFromQuoteHandler,
    MarkDepositPaidCommand,
    MarkDepositPaidHandler,
    MarkPaymentPaidCommand,
    MarkPaymentPaidHandler,
    UpdateBookingStatusCommand,
    UpdateBookingStatusHandler,
)
from apps.bookings.application.event_handlers import (
    send_booking_documents_on_create,
    send_booking_documents_on_status_change,
)
from apps.bookings.domain.events import BookingCreated, BookingStatusChanged


def register_handlers(bus: MessageBus = message_bus) -> MessageBus:
    commands = {
        CreateBookingFromQuoteCommand: CreateBookingFromQuoteHandler().handle,
        UpdateBookingStatusCommand: UpdateBookingStatusHandler().handle,
        MarkDepositPaidCommand: MarkDepositPaidHandler().handle,
        MarkPaymentPaidCommand: MarkPaymentPaidHandler().handle,
    }
    for command_type, handler in commands.items():
        if not bus.has_command_handler(command_type):
            bus.register_command_handler(command_type, handler)

    bus.register_event_handler(BookingCreated, send_booking_documents_on_create)
    bus.register_event_handler(BookingStatusChanged, send_booking_documents_on_status_change)
    return bus
