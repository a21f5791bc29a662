"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingActivity, BookingComponent, BookingPayment, BookingTraveler


class BookingComponentInline(admin.TabularInline):
    model = BookingComponent
    extra = 0
    fields = ("position", "component_type", "component_name", "quantity", "unit_price", "total_price", "supplier_ref")
    readonly_fields = fields
    can_delete = False


class BookingPaymentInline(admin.TabularInline):
    model = BookingPayment
    extra = 0
    fields = ("payment_number", "payment_type", "amount", "due_date", "paid", "paid_at", "reference")
    readonly_fields = ("payment_number", "payment_type", "amount", "due_date", "paid_at")
    can_delete = False


class BookingTravelerInline(admin.TabularInline):
    model = BookingTraveler
    extra = 0
    fields = ("traveler_number", "traveler_type", "first_name", "last_name", "email", "phone")
    can_delete = False


class BookingActivityInline(admin.TabularInline):
    model = BookingActivity
    extra = 0
    fields = ("created_at", "activity_type", "description", "performed_by")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_reference",
        "lead_traveler_name",
        "team",
        "status",
        "deposit_paid",
        "total_cost",
        "currency",
        "created_at",
    )
    list_filter = ("status", "deposit_paid", "team", "currency")
    search_fields = ("booking_reference", "lead_traveler_name", "lead_traveler_email")
    readonly_fields = (
        "booking_reference",
        "quote",
        "total_cost",
        "currency",
        "original_payment_schedule",
        "selected_components",
        "component_availability",
        "inventory_released_at",
        "created_at",
        "updated_at",
    )
    inlines = [BookingComponentInline, BookingPaymentInline, BookingTravelerInline, BookingActivityInline]
