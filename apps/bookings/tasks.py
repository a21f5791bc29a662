"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

import requests  # type: ignore
from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore

from .models import Booking

logger = logging.getLogger(__name__)

DOCUMENTS_WEBHOOK_TIMEOUT = 10


def build_document_payload(booking: Booking, event_type: str) -> dict:
    return {
        "event": event_type,
        "booking_id": str(booking.id),
        "booking_reference": booking.booking_reference,
        "quote_id": str(booking.quote_id),
        "team_id": str(booking.team_id),
        "status": booking.status,
        "lead_traveler": {
            "name": booking.lead_traveler_name,
            "email": booking.lead_traveler_email,
        },
        "total_cost": str(booking.total_cost),
        "currency": booking.currency,
    }


@shared_task(name="bookings.dispatch_booking_documents")
def dispatch_booking_documents(booking_id: str, event_type: str) -> bool:
    """Ask the document service to render and send the booking's paperwork.

    Returns False when no webhook is configured or the booking is gone.
    HTTP failures are raised so the task shows up as failed.
    """

    url = getattr(settings, "BOOKING_DOCUMENTS_WEBHOOK_URL", "")
    if not url:
        logger.info(f"Documents webhook not configured, skipping {event_type} for booking {booking_id}")
        return False

    try:
        booking = Booking.objects.get(pk=booking_id)
    except Booking.DoesNotExist:
        logger.warning(f"Booking {booking_id} not found, documents not dispatched")
        return False

    response = requests.post(
        url,
        json=build_document_payload(booking, event_type),
        timeout=DOCUMENTS_WEBHOOK_TIMEOUT,
    )
    response.raise_for_status()
    logger.info(f"Dispatched {event_type} documents for booking {booking.booking_reference}")
    return True
