"""Capacity consumption and release for booked components.

Both functions issue guarded single-statement updates, so they are safe to
call inside the booking transaction without locking inventory rows first.
"""

from __future__ import annotations

import logging
from typing import Iterable, TypeVar

from .availability import ComponentRequest
from .sources import get_inventory_source

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=ComponentRequest)


def reserve_components(entries: Iterable[RequestT]) -> list[RequestT]:
    """Consume capacity for every entry in order.

    Returns the entries that could not be satisfied. Capacity already taken
    for earlier entries is not given back here; the caller's transaction is
    expected to roll back when the returned list is non-empty.
    """
    failed: list[RequestT] = []
    for entry in entries:
        source = get_inventory_source(entry.component_type)
        if source is None or not source.consume(entry.component_id, int(entry.quantity)):
            failed.append(entry)
    if failed:
        logger.warning(f"Could not reserve {len(failed)} component(s)")
    return failed


def release_components(entries: Iterable[ComponentRequest]) -> None:
    """Give back capacity for counted components; binary ones are ignored."""
    for entry in entries:
        source = get_inventory_source(entry.component_type)
        if source is None or not source.counted:
            continue
        source.release(entry.component_id, int(entry.quantity))
        logger.info(f"Released {entry.quantity} x {entry.component_type} {entry.component_id}")
