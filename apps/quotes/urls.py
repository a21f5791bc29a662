"""URL routing for quotes."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import QuoteViewSet

router = SimpleRouter()
router.register(r"", QuoteViewSet, basename="quote")

urlpatterns = [
    path("", include(router.urls)),
]
