"""
Unit tests for order pricing and order numbers

Author: Tekashi
Date: 2025-11-03
"""
import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from tekashi.domain.order import (
    OrderCreate,
    OrderStatus,
    PaymentDetails,
    compute_totals,
    estimated_delivery,
    generate_order_number,
    points_discount,
    points_earned,
)

from conftest import make_order


class TestComputeTotals:

    def test_totals_add_tax_and_shipping(self):
        totals = compute_totals([Decimal("100.00"), Decimal("50.00")], Decimal("0.19"), Decimal("10"))

        assert totals.subtotal == Decimal("150.00")
        assert totals.tax == Decimal("28.50")
        assert totals.shipping_cost == Decimal("10.00")
        assert totals.total == Decimal("188.50")

    def test_discount_is_subtracted(self):
        totals = compute_totals([Decimal("100")], Decimal("0.19"), Decimal("0"), Decimal("19"))
        assert totals.total == Decimal("100.00")

    def test_tax_rounds_half_up_to_cents(self):
        totals = compute_totals([Decimal("0.05")], Decimal("0.19"))
        # 0.05 * 0.19 = 0.0095 -> 0.01
        assert totals.tax == Decimal("0.01")

    def test_negative_total_is_rejected(self):
        with pytest.raises(ValueError, match="Discount exceeds"):
            compute_totals([Decimal("10")], Decimal("0"), Decimal("0"), Decimal("50"))

    def test_empty_lines_total_zero(self):
        totals = compute_totals([], Decimal("0.19"))
        assert totals.total == Decimal("0.00")


class TestOrderNumber:

    def test_format(self):
        now = datetime(2025, 11, 3, 12, 0, tzinfo=timezone.utc)
        number = generate_order_number(now)

        millis = str(int(now.timestamp() * 1000))
        assert number.startswith("TK" + millis)
        assert re.fullmatch(r"TK\d{13}[0-9A-Z]{5}", number)

    def test_numbers_differ(self):
        numbers = {generate_order_number() for _ in range(50)}
        assert len(numbers) == 50

    def test_generated_number_is_accepted_as_client_number(self):
        number = generate_order_number()
        order = OrderCreate(
            items=[{"product_id": 1, "quantity": 1}],
            shipping_address={
                "name": "Ana", "email": "ana@example.com", "phone": "300",
                "address": "Calle 1", "city": "Bogota", "postal_code": "110111"
            },
            payment={"method": "cash_on_delivery"},
            order_number=number,
        )
        assert order.order_number == number


class TestPaymentDetails:

    def test_card_payment_requires_card_number(self):
        with pytest.raises(ValidationError):
            PaymentDetails(method="credit_card")

    def test_only_last_four_digits_are_kept(self):
        details = PaymentDetails(
            method="debit_card",
            card_number="4111 1111 1111 1234",
            security_code="123",
            holder_name="Ana"
        )
        info = details.to_payment_info()

        assert info.card_last4 == "1234"
        assert "card_number" not in info.model_dump()
        assert "security_code" not in info.model_dump()

    def test_cash_needs_no_card(self):
        assert PaymentDetails(method="cash_on_delivery").to_payment_info().card_last4 is None


class TestOrderModel:

    def test_cancellable_only_while_pending_or_confirmed(self):
        assert make_order(status=OrderStatus.PENDING).is_cancellable
        assert make_order(status=OrderStatus.CONFIRMED).is_cancellable
        assert not make_order(status=OrderStatus.SHIPPED).is_cancellable
        assert not make_order(status=OrderStatus.CANCELLED).is_cancellable

    def test_to_dict_converts_money_and_adds_counts(self):
        data = make_order().to_dict()

        assert data['total'] == 238.0
        assert data['item_count'] == 1
        assert data['total_quantity'] == 2
        assert data['items'][0]['unit_price'] == 100.0

    def test_estimated_delivery_adds_days(self):
        confirmed = datetime(2025, 11, 3, tzinfo=timezone.utc)
        assert estimated_delivery(confirmed, 3) == datetime(2025, 11, 6, tzinfo=timezone.utc)

    def test_order_needs_items(self):
        with pytest.raises(ValidationError):
            OrderCreate(
                items=[],
                shipping_address={
                    "name": "Ana", "email": "ana@example.com", "phone": "300",
                    "address": "Calle 1", "city": "Bogota", "postal_code": "110111"
                },
                payment={"method": "paypal"},
            )


class TestLoyaltyPoints:

    def test_points_discount_uses_point_value(self):
        assert points_discount(25, Decimal("0.10")) == Decimal("2.50")
        assert points_discount(0, Decimal("0.10")) == Decimal("0.00")

    def test_points_earned_per_full_spend(self):
        assert points_earned(Decimal("238.00"), Decimal("10")) == 23
        assert points_earned(Decimal("9.99"), Decimal("10")) == 0

    def test_no_points_without_a_spend_rate(self):
        assert points_earned(Decimal("238.00"), Decimal("0")) == 0
