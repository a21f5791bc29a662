"""Django REST Framework glue for the shared kernel."""

from __future__ import annotations

import logging

from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.errors import DomainError

logger = logging.getLogger(__name__)


def domain_exception_handler(exc, context):  # type: ignore
    """Render ``DomainError`` as ``{"code", "detail"}`` with the error's HTTP status.

    Errors that carry extra payload (for example the availability report)
    expose it through ``extra_payload()``. Everything else falls through to
    DRF's default handler.
    """
    if isinstance(exc, DomainError):
        data = exc.to_dict()
        extra = getattr(exc, "extra_payload", None)
        if callable(extra):
            data.update(extra())
        if exc.http_status >= 500:
            view = context.get("view")
            logger.error(f"{exc.code.value} in {view.__class__.__name__ if view else 'unknown view'}: {exc}")
        return Response(data, status=exc.http_status)
    return drf_exception_handler(exc, context)
