"""Order money breakdown."""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from app.models.shared import to_money

TAX_RATE = Decimal("0.15")


@dataclass(frozen=True)
class OrderTotals:
    items_price: Decimal
    shipping_price: Decimal
    subtotal: Decimal
    discount_amount: Decimal
    tax_price: Decimal
    total_price: Decimal


def items_price_for(items: Iterable[Any]) -> Decimal:
    """Sum of quantity times unit price over order lines."""
    total = sum(
        (Decimal(str(item.unit_price)) * item.quantity for item in items),
        Decimal("0"),
    )
    return to_money(total)


def calculate_order_totals(
    items_price: Decimal | int | float | str,
    shipping_price: Decimal | int | float | str,
    discount_amount: Decimal | int | float | str = 0,
) -> OrderTotals:
    """Derive subtotal, tax and total for an order.

    Tax is charged on the subtotal after the discount; neither the taxable
    amount nor the total goes below zero.
    """
    items = to_money(items_price)
    shipping = to_money(shipping_price)
    discount = to_money(discount_amount)
    subtotal = items + shipping

    taxable_amount = max(Decimal("0"), subtotal - discount)
    tax_price = to_money(TAX_RATE * taxable_amount)
    total_price = max(Decimal("0.00"), to_money(subtotal - discount + tax_price))

    return OrderTotals(
        items_price=items,
        shipping_price=shipping,
        subtotal=subtotal,
        discount_amount=discount,
        tax_price=tax_price,
        total_price=total_price,
    )
