"""Quote store: team-scoped lookups, revisions and status changes."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Max, Q, QuerySet  # type: ignore
from django.utils import timezone  # type: ignore

from apps.users.scope import TeamScope
from shared.domain.base import coerce_uuid
from shared.infrastructure.db import lock_queryset_if_possible

from .domain.errors import InvalidQuoteRevisionError, InvalidQuoteStatusError, QuoteLockedError, QuoteNotFoundError
from .domain.snapshot import QuoteBookingData, extract_booking_data
from .models import Quote

logger = logging.getLogger(__name__)

REVISABLE_FIELDS = frozenset(
    {
        "client_name",
        "client_email",
        "client_phone",
        "client_address",
        "event_id",
        "event_name",
        "package_id",
        "package_name",
        "tier_id",
        "tier_name",
        "adults",
        "children",
        "selected_components",
        "total_price",
        "currency",
        "payment_deposit",
        "payment_deposit_date",
        "payment_second_payment",
        "payment_second_payment_date",
        "payment_final_payment",
        "payment_final_payment_date",
        "internal_notes",
    }
)

# Fields a revision does not inherit from the quote it revises.
NOT_COPIED_ON_REVISION = frozenset(
    {"id", "version", "parent_quote", "root_quote", "status", "accepted_at", "confirmed_at", "created_at", "updated_at"}
)

SETTABLE_STATUSES = frozenset(
    {
        Quote.Status.DRAFT,
        Quote.Status.SENT,
        Quote.Status.ACCEPTED,
        Quote.Status.DECLINED,
        Quote.Status.EXPIRED,
    }
)


def team_quotes(scope: TeamScope) -> QuerySet:
    scope = scope.require()
    return Quote.objects.filter(team_id=scope.team_id)


def get_quote(scope: TeamScope, quote_id: Any, *, lock: bool = False) -> Quote:
    """Load a quote of the caller's team; ``lock`` takes a row lock inside atomic()."""
    queryset = team_quotes(scope)
    pk = coerce_uuid(quote_id)
    if pk is None:
        raise QuoteNotFoundError(quote_id)
    queryset = queryset.filter(pk=pk)
    if lock:
        queryset = lock_queryset_if_possible(queryset)
    quote = queryset.first()
    if quote is None:
        raise QuoteNotFoundError(quote_id)
    return quote


def list_quotes(scope: TeamScope, status: str | None = None) -> QuerySet:
    queryset = team_quotes(scope).select_related("created_by")
    if status:
        queryset = queryset.filter(status=status)
    return queryset


@transaction.atomic
def create_revision(scope: TeamScope, quote_id: Any, changes: Mapping[str, Any]) -> Quote:
    """Copy a quote into a new draft row with ``changes`` applied.

    The new row points at the revised quote through ``parent_quote`` and
    takes the next version number in the quote's family. The revised quote
    itself is left untouched.
    """
    unknown = set(changes) - REVISABLE_FIELDS
    if unknown:
        raise InvalidQuoteRevisionError(unknown)

    parent = get_quote(scope, quote_id)
    root = parent.family_root
    # Serialize concurrent revisions of the same family on the root row
    lock_queryset_if_possible(Quote.objects.filter(pk=root.pk)).first()
    family = Quote.objects.filter(Q(pk=root.pk) | Q(root_quote_id=root.pk))
    latest_version = family.aggregate(latest=Max("version"))["latest"] or parent.version

    values = {
        field.attname: getattr(parent, field.attname)
        for field in Quote._meta.concrete_fields
        if field.name not in NOT_COPIED_ON_REVISION
    }
    values.update(changes)
    revision = Quote.objects.create(
        **values,
        version=latest_version + 1,
        parent_quote=parent,
        root_quote=root,
        status=Quote.Status.DRAFT,
    )
    logger.info(
        f"Created revision {revision.id} (v{revision.version}) of quote {parent.id} "
        f"for team {scope.team_id}"
    )
    return revision


def update_quote_status(scope: TeamScope, quote_id: Any, status: str) -> Quote:
    """Move a quote between draft/sent/accepted/declined/expired.

    ``confirmed`` is set only by booking creation, and a confirmed quote
    keeps its status.
    """
    if status not in SETTABLE_STATUSES:
        raise InvalidQuoteStatusError(status)

    with transaction.atomic():
        quote = get_quote(scope, quote_id, lock=True)
        if quote.is_confirmed:
            raise QuoteLockedError(quote.id)
        quote.status = status
        update_fields = ["status", "updated_at"]
        if status == Quote.Status.ACCEPTED:
            quote.accepted_at = timezone.now()
            update_fields.append("accepted_at")
        quote.save(update_fields=update_fields)

    logger.info(f"Quote {quote.id} status set to {status}")
    return quote


def mark_quote_confirmed(quote: Quote) -> Quote:
    """Flag a quote as turned into a booking; called inside the booking transaction."""
    quote.status = Quote.Status.CONFIRMED
    quote.confirmed_at = timezone.now()
    quote.save(update_fields=["status", "confirmed_at", "updated_at"])
    return quote


def get_booking_data(scope: TeamScope, quote_id: Any) -> QuoteBookingData:
    quote = get_quote(scope, quote_id)
    return extract_booking_data(quote, default_currency=settings.BOOKING_DEFAULT_CURRENCY)

