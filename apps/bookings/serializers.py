"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.scope import TeamScope

from .application.command_handlers import CreateBookingFromQuoteCommand
from .domain.entities import FlightDetails, GuestTraveler, LeadTraveler, LoungePassDetails, PaymentInstruction
from .models import Booking, BookingActivity, BookingComponent, BookingPayment, BookingTraveler


class LeadTravelerInputSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150, allow_blank=True, default="")
    email = serializers.EmailField(allow_blank=True, default="")
    phone = serializers.CharField(max_length=50, allow_blank=True, default="")
    address = serializers.DictField(required=False, default=dict)


class GuestTravelerInputSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150, allow_blank=True, default="")
    email = serializers.EmailField(allow_blank=True, default="")
    phone = serializers.CharField(max_length=50, allow_blank=True, default="")
    date_of_birth = serializers.DateField(required=False, allow_null=True, default=None)
    passport_number = serializers.CharField(max_length=50, allow_blank=True, default="")
    nationality = serializers.CharField(max_length=100, allow_blank=True, default="")
    dietary_restrictions = serializers.CharField(max_length=255, allow_blank=True, default="")
    accessibility_needs = serializers.CharField(max_length=255, allow_blank=True, default="")
    special_requests = serializers.CharField(allow_blank=True, default="")


class PaymentInstructionSerializer(serializers.Serializer):
    payment_type = serializers.ChoiceField(choices=BookingPayment.PaymentType.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(allow_blank=True, default="")


class FlightDetailsSerializer(serializers.Serializer):
    booking_ref = serializers.CharField(max_length=255, allow_blank=True, default="")
    ticketing_deadline = serializers.DateField(required=False, allow_null=True, default=None)
    flight_status = serializers.CharField(max_length=100, allow_blank=True, default="")
    notes = serializers.CharField(allow_blank=True, default="")


class LoungePassDetailsSerializer(serializers.Serializer):
    booking_ref = serializers.CharField(max_length=255, allow_blank=True, default="")
    notes = serializers.CharField(allow_blank=True, default="")


class CreateBookingSerializer(serializers.Serializer):
    """Booking form submitted for a quote."""

    quote_id = serializers.UUIDField()
    lead_traveler = LeadTravelerInputSerializer()
    guest_travelers = GuestTravelerInputSerializer(many=True, required=False)
    adjusted_payment_schedule = PaymentInstructionSerializer(many=True, required=False, allow_null=True)
    booking_notes = serializers.CharField(allow_blank=True, default="")
    internal_notes = serializers.CharField(allow_blank=True, default="")
    special_requests = serializers.CharField(allow_blank=True, default="")
    deposit_paid = serializers.BooleanField(default=False)
    deposit_reference = serializers.CharField(max_length=255, allow_blank=True, default="")
    flights = FlightDetailsSerializer(many=True, required=False)
    lounge_passes = LoungePassDetailsSerializer(many=True, required=False)

    def to_command(self, scope: TeamScope) -> CreateBookingFromQuoteCommand:
        data = self.validated_data
        schedule = data.get("adjusted_payment_schedule")
        return CreateBookingFromQuoteCommand(
            scope=scope,
            quote_id=data["quote_id"],
            lead_traveler=LeadTraveler(**data["lead_traveler"]),
            guest_travelers=[GuestTraveler(**guest) for guest in data.get("guest_travelers", [])],
            adjusted_payment_schedule=(
                None if schedule is None else [PaymentInstruction(**payment) for payment in schedule]
            ),
            booking_notes=data["booking_notes"],
            internal_notes=data["internal_notes"],
            special_requests=data["special_requests"],
            deposit_paid=data["deposit_paid"],
            deposit_reference=data["deposit_reference"],
            flights=[FlightDetails(**flight) for flight in data.get("flights", [])],
            lounge_passes=[LoungePassDetails(**lounge) for lounge in data.get("lounge_passes", [])],
        )


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.Status.choices)
    notes = serializers.CharField(allow_blank=True, required=False, allow_null=True)


class DepositPaidSerializer(serializers.Serializer):
    reference = serializers.CharField(max_length=255, allow_blank=True, default="")


class PaymentPaidSerializer(serializers.Serializer):
    payment_number = serializers.IntegerField(min_value=1)
    reference = serializers.CharField(max_length=255, allow_blank=True, default="")


class BookingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_reference",
            "quote_id",
            "team_id",
            "created_by_id",
            "status",
            "client_id",
            "lead_traveler_name",
            "lead_traveler_email",
            "lead_traveler_phone",
            "event_id",
            "event_name",
            "package_id",
            "package_name",
            "tier_id",
            "tier_name",
            "total_cost",
            "currency",
            "original_payment_schedule",
            "adjusted_payment_schedule",
            "selected_components",
            "component_availability",
            "deposit_amount",
            "deposit_paid",
            "deposit_paid_at",
            "deposit_reference",
            "booking_notes",
            "internal_notes",
            "special_requests",
            "confirmed_at",
            "cancelled_at",
            "inventory_released_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingComponentSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingComponent
        fields = [
            "id",
            "position",
            "component_type",
            "component_id",
            "component_name",
            "quantity",
            "unit_price",
            "total_price",
            "component_data",
            "component_snapshot",
            "supplier_ref",
            "booking_notes",
        ]
        read_only_fields = fields


class BookingPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingPayment
        fields = ["id", "payment_number", "payment_type", "amount", "due_date", "paid", "paid_at", "reference", "notes"]
        read_only_fields = fields


class BookingTravelerSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingTraveler
        fields = [
            "id",
            "traveler_number",
            "traveler_type",
            "first_name",
            "last_name",
            "email",
            "phone",
            "address",
            "date_of_birth",
            "passport_number",
            "nationality",
            "dietary_restrictions",
            "accessibility_needs",
            "special_requests",
        ]
        read_only_fields = fields


class BookingActivitySerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingActivity
        fields = ["id", "activity_type", "description", "performed_by_id", "created_at"]
        read_only_fields = fields


class BookingDetailsSerializer(serializers.Serializer):
    """Booking header with its components, payments, travelers and history."""

    booking = BookingSerializer()
    components = BookingComponentSerializer(many=True)
    payments = BookingPaymentSerializer(many=True)
    travelers = BookingTravelerSerializer(many=True)
    activities = BookingActivitySerializer(many=True)

    def to_representation(self, instance):  # type: ignore
        data = super().to_representation(instance)
        details = dict(data.pop("booking"))
        details.update(data)
        return details


class BookingStatsSerializer(serializers.Serializer):
    total_bookings = serializers.IntegerField()
    pending_bookings = serializers.IntegerField()
    confirmed_bookings = serializers.IntegerField()
    cancelled_bookings = serializers.IntegerField()
    completed_bookings = serializers.IntegerField()
    refunded_bookings = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    average_booking_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    this_month_bookings = serializers.IntegerField()
    this_month_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
