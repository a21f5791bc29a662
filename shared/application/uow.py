"""
Unit of Work

One use case, one database transaction. Domain events recorded during the
use case leave the process only once that transaction has committed.
"""

from functools import partial
from typing import List, Optional, Tuple
import logging

from django.db import transaction

from shared.application.message_bus import MessageBus, message_bus
from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Transaction boundary for booking and quote use cases

    Usage:
        with DjangoUnitOfWork() as uow:
            quote = get_quote(scope, quote_id, lock=True)
            booking = Booking.objects.create(quote=quote, ...)
            uow.record(BookingCreated(aggregate_id=booking.id, ...))
        # BookingCreated reaches the bus after the outermost commit

    Nested inside another atomic block the unit of work is a savepoint: its
    writes and events are discarded if the block raises, and its events wait
    for the outer transaction.
    """

    def __init__(self, using: Optional[str] = None, bus: Optional[MessageBus] = None):
        self.using = using
        self._bus = bus or message_bus
        self._atomic = None
        self._pending: List[DomainEvent] = []

    def __enter__(self) -> 'DjangoUnitOfWork':
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pending, self._pending = self._pending, []
        try:
            if exc_type is None:
                self._schedule(pending)
            elif pending:
                logger.warning(
                    f"Unit of work failed with {exc_type.__name__}, dropping {len(pending)} events"
                )
        finally:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def record(self, *events: DomainEvent):
        for event in events:
            self._pending.append(event)
            logger.debug(f"Recorded {event.__class__.__name__} for aggregate {event.aggregate_id}")

    @property
    def events(self) -> Tuple[DomainEvent, ...]:
        return tuple(self._pending)

    def _schedule(self, events: List[DomainEvent]):
        if not events:
            return
        transaction.on_commit(partial(self._publish, events), using=self.using)

    def _publish(self, events: List[DomainEvent]):
        logger.info(f"Publishing {len(events)} domain events after commit")
        try:
            self._bus.publish_events(events)
        except Exception as e:
            # The transaction has already committed
            logger.error(f"Error publishing events: {e}", exc_info=True)
