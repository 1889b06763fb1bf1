"""Reward tier table for automatically issued coupons."""

from dataclasses import dataclass
from decimal import Decimal

# Smallest order base amount that earns any reward
QUALIFYING_MINIMUM = Decimal("200")


@dataclass(frozen=True)
class CouponTier:
    """Terms of the coupon an order earns."""

    tier: str
    discount_value: Decimal
    min_purchase: Decimal
    max_discount: Decimal
    description: str


# Highest threshold first; the first match wins.
REWARD_TIERS: tuple[CouponTier, ...] = (
    CouponTier(
        tier="15%",
        discount_value=Decimal("15"),
        min_purchase=Decimal("1000"),
        max_discount=Decimal("150"),
        description="Congratulations! You earned 15% off for your big purchase",
    ),
    CouponTier(
        tier="10%",
        discount_value=Decimal("10"),
        min_purchase=Decimal("500"),
        max_discount=Decimal("50"),
        description="Excellent! You earned 10% off",
    ),
    CouponTier(
        tier="5%",
        discount_value=Decimal("5"),
        min_purchase=QUALIFYING_MINIMUM,
        max_discount=Decimal("25"),
        description="Thanks for your purchase! You earned 5% off",
    ),
)


def resolve_tier(base_amount: Decimal | int | float | str) -> CouponTier | None:
    """Pick the reward tier for an order's pre-tax, pre-discount amount.

    Lower bounds are inclusive. Returns None below the qualifying minimum.

    Raises:
        ValueError: If the amount is negative.
    """
    amount = Decimal(str(base_amount))
    if amount < 0:
        raise ValueError("Base amount cannot be negative")

    for tier in REWARD_TIERS:
        if amount >= tier.min_purchase:
            return tier
    return None
