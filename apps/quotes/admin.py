"""Admin registrations for quotes."""

from __future__ import annotations

from django.contrib import admin

from .models import Quote


@admin.register(Quote)
class QuoteAdmin(admin.ModelAdmin):
    list_display = ("quote_number", "version", "client_name", "team", "status", "total_price", "currency", "created_at")
    list_filter = ("status", "team", "currency")
    search_fields = ("quote_number", "client_name", "client_email")
    readonly_fields = ("quote_number", "version", "parent_quote", "root_quote", "confirmed_at", "created_at", "updated_at")
