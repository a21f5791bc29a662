"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import permissions, serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.scope import TeamScope
from shared.application.message_bus import message_bus

from .application.command_handlers import (
    MarkDepositPaidCommand,
    MarkPaymentPaidCommand,
    UpdateBookingStatusCommand,
)
from .application.queries import DEFAULT_PAGE_SIZE, BookingQueries
from .serializers import (
    BookingDetailsSerializer,
    BookingPaymentSerializer,
    BookingSerializer,
    BookingStatsSerializer,
    BookingStatusSerializer,
    CreateBookingSerializer,
    DepositPaidSerializer,
    PaymentPaidSerializer,
)


class BookingPageParamsSerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True)
    limit = serializers.IntegerField(required=False, min_value=1, default=DEFAULT_PAGE_SIZE)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)


class BookingViewSet(viewsets.ViewSet):
    """Team bookings: conversion from quotes, lifecycle and reporting."""

    permission_classes = [permissions.IsAuthenticated]

    def get_scope(self) -> TeamScope:
        return TeamScope.for_user(self.request.user)

    def get_queries(self) -> BookingQueries:
        return BookingQueries(self.get_scope())

    def _details_response(self, booking_id, status_code=status.HTTP_200_OK) -> Response:
        details = self.get_queries().get_booking_details(booking_id)
        return Response(BookingDetailsSerializer(details).data, status=status_code)

    def list(self, request):  # type: ignore
        params = BookingPageParamsSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        page = self.get_queries().get_team_bookings(
            status=params.validated_data.get("status") or None,
            limit=params.validated_data["limit"],
            offset=params.validated_data["offset"],
        )
        return Response(
            {
                "count": page.total,
                "limit": page.limit,
                "offset": page.offset,
                "results": BookingSerializer(page.bookings, many=True).data,
            }
        )

    def retrieve(self, request, pk=None):  # type: ignore
        return self._details_response(pk)

    def create(self, request):  # type: ignore
        serializer = CreateBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking_id = message_bus.handle_command(serializer.to_command(self.get_scope()))
        return self._details_response(booking_id, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request, pk=None):  # type: ignore
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(
            UpdateBookingStatusCommand(
                scope=self.get_scope(),
                booking_id=pk,
                status=serializer.validated_data["status"],
                notes=serializer.validated_data.get("notes"),
            )
        )
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"], url_path="deposit")
    def mark_deposit_paid(self, request, pk=None):  # type: ignore
        serializer = DepositPaidSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(
            MarkDepositPaidCommand(
                scope=self.get_scope(),
                booking_id=pk,
                reference=serializer.validated_data["reference"],
            )
        )
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"], url_path="payments")
    def mark_payment_paid(self, request, pk=None):  # type: ignore
        serializer = PaymentPaidSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = message_bus.handle_command(
            MarkPaymentPaidCommand(
                scope=self.get_scope(),
                booking_id=pk,
                payment_number=serializer.validated_data["payment_number"],
                reference=serializer.validated_data["reference"],
            )
        )
        return Response(BookingPaymentSerializer(payment).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):  # type: ignore
        stats = self.get_queries().get_booking_stats()
        return Response(BookingStatsSerializer(stats).data)

    @action(detail=False, methods=["get"], url_path=r"by-quote/(?P<quote_id>[^/.]+)")
    def by_quote(self, request, quote_id=None):  # type: ignore
        booking = self.get_queries().get_booking_by_quote_id(quote_id)
        if booking is None:
            return Response({"detail": "No booking for this quote."}, status=status.HTTP_404_NOT_FOUND)
        return Response(BookingSerializer(booking).data)
