"""Serializers for the quotes API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Quote
from .services import SETTABLE_STATUSES


class QuoteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Quote
        fields = [
            "id",
            "quote_number",
            "version",
            "parent_quote_id",
            "status",
            "created_by_id",
            "client_id",
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
            "accepted_at",
            "confirmed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class QuoteRevisionSerializer(serializers.ModelSerializer):
    """Changes to apply on top of the revised quote; every field is optional."""

    class Meta:
        model = Quote
        fields = [
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
        ]
        extra_kwargs = {name: {"required": False} for name in fields}

    def validate_selected_components(self, value):  # type: ignore
        if not isinstance(value, (list, dict)):
            raise serializers.ValidationError("Expected a list of components or a legacy component object.")
        return value


class QuoteStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=sorted(str(status) for status in SETTABLE_STATUSES))


class SelectedComponentSerializer(serializers.Serializer):
    component_type = serializers.CharField()
    component_id = serializers.CharField(allow_null=True)
    name = serializers.CharField(allow_blank=True)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class PaymentScheduleEntrySerializer(serializers.Serializer):
    payment_type = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    due_date = serializers.DateField(allow_null=True)
    notes = serializers.CharField(allow_blank=True)


class LeadTravelerDataSerializer(serializers.Serializer):
    first_name = serializers.CharField(allow_blank=True)
    last_name = serializers.CharField(allow_blank=True)
    email = serializers.CharField(allow_blank=True)
    phone = serializers.CharField(allow_blank=True)
    address = serializers.DictField()


class QuoteBookingDataSerializer(serializers.Serializer):
    """Read-only rendering of ``QuoteBookingData`` for the booking form."""

    quote_id = serializers.UUIDField()
    lead_traveler = LeadTravelerDataSerializer()
    guest_count = serializers.IntegerField()
    components = SelectedComponentSerializer(many=True)
    payments = PaymentScheduleEntrySerializer(many=True)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    client_id = serializers.UUIDField(allow_null=True)
    event_id = serializers.UUIDField(allow_null=True)
    event_name = serializers.CharField(allow_blank=True)
    package_id = serializers.UUIDField(allow_null=True)
    package_name = serializers.CharField(allow_blank=True)
    tier_id = serializers.UUIDField(allow_null=True)
    tier_name = serializers.CharField(allow_blank=True)
    internal_notes = serializers.CharField(allow_blank=True)
