"""Tests for mapping stored quote JSON into typed values."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from apps.quotes.domain.snapshot import (
    extract_booking_data,
    normalize_selected_components,
    payment_schedule_from_quote,
    split_client_name,
)


def quote_stub(**overrides):
    values = {
        "id": "5b1e6a4e-0f9a-4f53-9d0c-2f0f1e4b7a10",
        "team_id": None,
        "client_id": None,
        "client_name": "Jane van der Berg",
        "client_email": "jane@example.com",
        "client_phone": "",
        "client_address": {"city": "London"},
        "event_id": None,
        "event_name": "British Grand Prix",
        "package_id": None,
        "package_name": "",
        "tier_id": None,
        "tier_name": "",
        "adults": 2,
        "children": 1,
        "selected_components": [],
        "total_price": Decimal("2500.00"),
        "currency": "",
        "payment_deposit": Decimal("500.00"),
        "payment_deposit_date": date(2026, 1, 15),
        "payment_second_payment": None,
        "payment_second_payment_date": None,
        "payment_final_payment": Decimal("2000.00"),
        "payment_final_payment_date": "2026-05-15",
        "internal_notes": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class NormalizeSelectedComponentsTests(SimpleTestCase):
    def test_list_layout_keeps_order_and_prices(self) -> None:
        components = normalize_selected_components(
            [
                {"type": "ticket", "id": "t-1", "name": "Grandstand A", "quantity": 2, "unitPrice": "450"},
                {"type": "hotel_room", "id": "h-1", "quantity": 1, "data": {"price": "300.50"}},
                {"type": "flight", "id": "f-1", "quantity": 2, "price": 200, "totalPrice": "380.00"},
            ]
        )

        self.assertEqual([c.component_type for c in components], ["ticket", "hotel_room", "flight"])
        self.assertEqual(components[0].unit_price, Decimal("450"))
        self.assertEqual(components[0].line_total, Decimal("900"))
        self.assertEqual(components[1].unit_price, Decimal("300.50"))
        self.assertEqual(components[2].line_total, Decimal("380.00"))

    def test_legacy_object_layout(self) -> None:
        components = normalize_selected_components(
            {
                "tickets": [{"id": "t-1", "quantity": 2, "price": 450}],
                "hotels": [{"roomId": "h-1", "quantity": 1, "price": 300}],
                "circuitTransfers": [{"id": "c-1", "quantity": 2}],
                "airportTransfers": [{"id": "a-1", "quantity": 1}],
                "flights": [{"id": "f-1", "passengers": 3}],
                "loungePass": {"id": "l-1", "quantity": 2},
            }
        )

        self.assertEqual(
            [(c.component_type, c.component_id, c.quantity) for c in components],
            [
                ("ticket", "t-1", 2),
                ("hotel_room", "h-1", 1),
                ("circuit_transfer", "c-1", 2),
                ("airport_transfer", "a-1", 1),
                ("flight", "f-1", 3),
                ("lounge_pass", "l-1", 2),
            ],
        )

    def test_empty_and_malformed_input(self) -> None:
        self.assertEqual(normalize_selected_components(None), [])
        self.assertEqual(normalize_selected_components("tickets"), [])
        self.assertEqual(normalize_selected_components([{"type": "ticket", "id": "t-1", "quantity": "0"}])[0].quantity, 1)


class BookingDataTests(SimpleTestCase):
    def test_split_client_name(self) -> None:
        self.assertEqual(split_client_name("Jane van der Berg"), ("Jane", "van der Berg"))
        self.assertEqual(split_client_name("Cher"), ("Cher", ""))
        self.assertEqual(split_client_name(""), ("", ""))

    def test_payment_schedule_always_has_three_entries(self) -> None:
        schedule = payment_schedule_from_quote(quote_stub())

        self.assertEqual(
            [(p.payment_type, p.amount, p.due_date) for p in schedule],
            [
                ("deposit", Decimal("500.00"), date(2026, 1, 15)),
                ("second_payment", Decimal("0"), None),
                ("final_payment", Decimal("2000.00"), date(2026, 5, 15)),
            ],
        )

    def test_extract_booking_data(self) -> None:
        data = extract_booking_data(quote_stub(), default_currency="EUR")

        self.assertEqual(data.lead_traveler.first_name, "Jane")
        self.assertEqual(data.lead_traveler.last_name, "van der Berg")
        self.assertEqual(data.lead_traveler.address, {"city": "London"})
        self.assertEqual(data.guest_count, 2)
        self.assertEqual(data.currency, "EUR")
        self.assertEqual(data.total_price, Decimal("2500.00"))
        self.assertEqual(data.internal_notes, "")

    def test_guest_count_never_negative(self) -> None:
        data = extract_booking_data(quote_stub(adults=0, children=0))

        self.assertEqual(data.guest_count, 0)
