"""Booking audit trail."""

from __future__ import annotations

import logging
from typing import Any, Optional

from django.db import DatabaseError, transaction  # type: ignore

from .models import BookingActivity

logger = logging.getLogger(__name__)

ActivityType = BookingActivity.ActivityType


class ActivityLogger:
    """Appends ``BookingActivity`` rows.

    Each insert runs in its own savepoint, so a failed insert is rolled
    back on its own and the surrounding booking transaction carries on.
    """

    def log(
        self,
        booking_id: Any,
        activity_type: str,
        description: str,
        actor_id: Optional[int] = None,
    ) -> Optional[BookingActivity]:
        try:
            with transaction.atomic():
                return BookingActivity.objects.create(
                    booking_id=booking_id,
                    activity_type=activity_type,
                    description=description,
                    performed_by_id=actor_id,
                )
        except DatabaseError as exc:
            logger.error(
                f"Failed to log booking activity {activity_type} for booking {booking_id}: {exc}",
                exc_info=True,
            )
            return None


activity_logger = ActivityLogger()
