"""Tests for order money breakdown."""

from decimal import Decimal
from types import SimpleNamespace

from app.services.order_totals import TAX_RATE, calculate_order_totals, items_price_for


class TestItemsPrice:
    def test_sums_quantity_times_price(self):
        items = [
            SimpleNamespace(quantity=2, unit_price=Decimal("19.99")),
            SimpleNamespace(quantity=1, unit_price=Decimal("5.50")),
        ]
        assert items_price_for(items) == Decimal("45.48")

    def test_empty(self):
        assert items_price_for([]) == Decimal("0.00")


class TestCalculateOrderTotals:
    def test_without_discount(self):
        totals = calculate_order_totals(Decimal("600"), Decimal("10"))
        assert totals.subtotal == Decimal("610.00")
        assert totals.discount_amount == Decimal("0.00")
        assert totals.tax_price == Decimal("91.50")
        assert totals.total_price == Decimal("701.50")

    def test_tax_applies_after_discount(self):
        totals = calculate_order_totals(Decimal("1000"), Decimal("0"), Decimal("50"))
        assert totals.tax_price == TAX_RATE * Decimal("950")
        assert totals.total_price == Decimal("1092.50")

    def test_discount_equal_to_subtotal(self):
        totals = calculate_order_totals(Decimal("80"), Decimal("20"), Decimal("100"))
        assert totals.tax_price == Decimal("0.00")
        assert totals.total_price == Decimal("0.00")

    def test_total_never_negative(self):
        totals = calculate_order_totals(Decimal("80"), Decimal("0"), Decimal("100"))
        assert totals.tax_price == Decimal("0.00")
        assert totals.total_price == Decimal("0.00")

    def test_tax_rounds_half_up(self):
        # 15% of 0.10 is 0.015
        totals = calculate_order_totals(Decimal("0.10"), Decimal("0"))
        assert totals.tax_price == Decimal("0.02")

    def test_accepts_floats(self):
        totals = calculate_order_totals(19.99, 5)
        assert totals.items_price == Decimal("19.99")
        assert totals.shipping_price == Decimal("5.00")
        assert totals.subtotal == Decimal("24.99")
