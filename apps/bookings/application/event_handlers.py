"""
Booking Event Handlers

Side effects triggered by committed booking events. They run after the
transaction commits and only enqueue Celery work.
"""

import logging

from apps.bookings.domain.entities import BookingStatus
from apps.bookings.domain.events import BookingCreated, BookingStatusChanged

logger = logging.getLogger(__name__)

DOCUMENT_STATUSES = {BookingStatus.CONFIRMED.value, BookingStatus.CANCELLED.value}


def send_booking_documents_on_create(event: BookingCreated):
    from apps.bookings.tasks import dispatch_booking_documents

    dispatch_booking_documents.delay(str(event.booking_id), 'booking_created')


def send_booking_documents_on_status_change(event: BookingStatusChanged):
    if event.new_status not in DOCUMENT_STATUSES:
        return
    from apps.bookings.tasks import dispatch_booking_documents

    dispatch_booking_documents.delay(str(event.booking_id), f"booking_{event.new_status}")
