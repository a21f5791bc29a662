"""Quote models for the TourDesk back office."""

from __future__ import annotations

import secrets
import string
import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


class Quote(models.Model):
    """Client quote; a frozen snapshot once sent, revised by adding rows."""

    class Status(models.TextChoices):
        DRAFT = "draft", _("Draft")
        SENT = "sent", _("Sent")
        ACCEPTED = "accepted", _("Accepted")
        DECLINED = "declined", _("Declined")
        EXPIRED = "expired", _("Expired")
        CONFIRMED = "confirmed", _("Confirmed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    team = models.ForeignKey("users.Team", on_delete=models.CASCADE, related_name="quotes")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="quotes",
    )
    quote_number = models.CharField(max_length=20, editable=False, db_index=True)
    version = models.PositiveIntegerField(default=1)
    parent_quote = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="revisions",
    )
    root_quote = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="family",
        help_text=_("First version of this quote; empty on the first version itself."),
    )

    client_id = models.UUIDField(null=True, blank=True)
    client_name = models.CharField(max_length=255)
    client_email = models.EmailField(blank=True)
    client_phone = models.CharField(max_length=50, blank=True)
    client_address = models.JSONField(default=dict, blank=True)

    event_id = models.UUIDField(null=True, blank=True)
    event_name = models.CharField(max_length=255, blank=True)
    package_id = models.UUIDField(null=True, blank=True)
    package_name = models.CharField(max_length=255, blank=True)
    tier_id = models.UUIDField(null=True, blank=True)
    tier_name = models.CharField(max_length=255, blank=True)

    adults = models.PositiveSmallIntegerField(default=1)
    children = models.PositiveSmallIntegerField(default=0)
    selected_components = models.JSONField(default=list, blank=True, encoder=DjangoJSONEncoder)

    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="GBP")
    payment_deposit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_deposit_date = models.DateField(null=True, blank=True)
    payment_second_payment = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_second_payment_date = models.DateField(null=True, blank=True)
    payment_final_payment = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_final_payment_date = models.DateField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    internal_notes = models.TextField(blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Quote")
        verbose_name_plural = _("Quotes")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["team", "status"]),
            models.Index(fields=["quote_number", "version"]),
        ]

    def __str__(self) -> str:
        return f"Quote {self.quote_number} v{self.version} for {self.client_name}"

    def save(self, *args, **kwargs):  # type: ignore
        if not self.quote_number:
            self.quote_number = self.generate_quote_number()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_quote_number() -> str:
        suffix = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(6))
        return f"Q-{timezone.now().year}-{suffix}"

    @property
    def family_root(self) -> "Quote":
        return self.root_quote or self

    @property
    def is_confirmed(self) -> bool:
        return self.status == self.Status.CONFIRMED
