"""API views for quotes."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.scope import TeamScope

from . import services
from .serializers import (
    QuoteBookingDataSerializer,
    QuoteRevisionSerializer,
    QuoteSerializer,
    QuoteStatusSerializer,
)


class QuoteViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Team quotes: listing, lookup, revisions and status changes."""

    serializer_class = QuoteSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status"]

    def get_scope(self) -> TeamScope:
        return TeamScope.for_user(self.request.user)

    def get_queryset(self):  # type: ignore
        return services.list_quotes(self.get_scope())

    def retrieve(self, request, pk=None):  # type: ignore
        quote = services.get_quote(self.get_scope(), pk)
        return Response(QuoteSerializer(quote).data)

    @action(detail=True, methods=["post"])
    def revise(self, request, pk=None):  # type: ignore
        serializer = QuoteRevisionSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        revision = services.create_revision(self.get_scope(), pk, serializer.validated_data)
        return Response(QuoteSerializer(revision).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request, pk=None):  # type: ignore
        serializer = QuoteStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quote = services.update_quote_status(self.get_scope(), pk, serializer.validated_data["status"])
        return Response(QuoteSerializer(quote).data)

    @action(detail=True, methods=["get"], url_path="booking-data")
    def booking_data(self, request, pk=None):  # type: ignore
        data = services.get_booking_data(self.get_scope(), pk)
        return Response(QuoteBookingDataSerializer(data).data)
