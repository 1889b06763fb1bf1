"""Discount calculation for a coupon against an order total."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol

from app.models.coupon import CouponState, DiscountType
from app.models.shared import to_money
from app.services.coupon_lifecycle import coupon_state

_STATE_REASONS = {
    CouponState.USED: "coupon has already been used",
    CouponState.EXPIRED: "coupon has expired",
    CouponState.DEACTIVATED: "coupon has been deactivated",
}


class CouponTerms(Protocol):
    is_active: Any
    is_used: Any
    expires_at: Any
    discount_type: Any
    discount_value: Any
    min_purchase: Any
    max_discount: Any


@dataclass
class DiscountResult:
    """Verdict of pricing a coupon against an order total."""

    is_valid: bool
    discount: Decimal
    reason: str | None = None
    discount_type: str | None = None
    discount_value: Decimal | None = None
    final_total: Decimal | None = None


def calculate_discount(
    coupon: CouponTerms,
    order_total: Decimal | int | float | str,
    now: datetime,
) -> DiscountResult:
    """Price a coupon against an order total.

    Business failures come back as an invalid verdict with a reason and a zero
    discount; nothing is raised and nothing is written.

    The discount is capped by ``max_discount`` (when set) and by the order total,
    then rounded half-up to cents. ``final_total`` is the order total minus the
    rounded discount.
    """
    state = coupon_state(coupon, now)
    if state != CouponState.ACTIVE:
        return DiscountResult(
            is_valid=False,
            discount=Decimal("0.00"),
            reason=f"Invalid or expired coupon: {_STATE_REASONS[state]}",
        )

    total = Decimal(str(order_total))
    if total <= 0:
        return DiscountResult(
            is_valid=False,
            discount=Decimal("0.00"),
            reason="Order total must be greater than zero",
        )

    min_purchase = Decimal(str(coupon.min_purchase or 0))
    if total < min_purchase:
        return DiscountResult(
            is_valid=False,
            discount=Decimal("0.00"),
            reason=f"Minimum purchase required: ${min_purchase:.2f}",
        )

    value = Decimal(str(coupon.discount_value))
    if coupon.discount_type == DiscountType.PERCENTAGE.value:
        discount = total * value / Decimal("100")
    else:
        discount = value

    if coupon.max_discount is not None:
        discount = min(discount, Decimal(str(coupon.max_discount)))

    discount = min(discount, total)

    discount = to_money(discount)
    return DiscountResult(
        is_valid=True,
        discount=discount,
        discount_type=getattr(coupon.discount_type, "value", coupon.discount_type),
        discount_value=value,
        final_total=to_money(total - discount),
    )
