"""Admin registrations for inventory tables."""

from __future__ import annotations

from django.contrib import admin

from .models import AirportTransfer, CircuitTransfer, Flight, HotelRoom, LoungePass, Ticket


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ("category_name", "quantity_total", "quantity_reserved", "price", "currency")
    search_fields = ("category_name", "supplier")
    readonly_fields = ("created_at", "updated_at")


@admin.register(HotelRoom)
class HotelRoomAdmin(admin.ModelAdmin):
    list_display = ("hotel_name", "room_type", "check_in", "check_out", "quantity_total", "quantity_reserved")
    list_filter = ("hotel_name",)
    search_fields = ("hotel_name", "room_type")
    readonly_fields = ("created_at", "updated_at")


@admin.register(CircuitTransfer)
class CircuitTransferAdmin(admin.ModelAdmin):
    list_display = ("vehicle_name", "transfer_type", "coach_capacity", "used")
    readonly_fields = ("created_at", "updated_at")


@admin.register(AirportTransfer)
class AirportTransferAdmin(admin.ModelAdmin):
    list_display = ("vehicle_name", "transport_type", "max_capacity", "used")
    readonly_fields = ("created_at", "updated_at")


@admin.register(Flight)
class FlightAdmin(admin.ModelAdmin):
    list_display = ("outbound_flight_number", "return_flight_number", "airline", "active")
    list_filter = ("active", "airline")
    search_fields = ("outbound_flight_number", "return_flight_number")
    readonly_fields = ("created_at", "updated_at")


@admin.register(LoungePass)
class LoungePassAdmin(admin.ModelAdmin):
    list_display = ("lounge_name", "variant", "airport_code", "is_active")
    list_filter = ("is_active",)
    readonly_fields = ("created_at", "updated_at")
