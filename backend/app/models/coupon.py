"""Coupon model for reward discounts."""

from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    func,
)

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid

CODE_MIN_LENGTH = 6
CODE_MAX_LENGTH = 20


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class GenerationType(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"


class CouponState(str, Enum):
    """Derived state of a coupon; never stored."""

    ACTIVE = "active"
    EXPIRED = "expired"
    DEACTIVATED = "deactivated"
    USED = "used"


class Coupon(Base):
    """Single-use coupon owned by one user."""

    __tablename__ = "coupons"
    __table_args__ = (
        CheckConstraint("discount_value >= 0", name="ck_coupons_discount_value_non_negative"),
        CheckConstraint(
            "discount_type != 'percentage' OR discount_value <= 100",
            name="ck_coupons_percentage_max_100",
        ),
        CheckConstraint("min_purchase >= 0", name="ck_coupons_min_purchase_non_negative"),
        CheckConstraint(
            "max_discount IS NULL OR max_discount >= 0",
            name="ck_coupons_max_discount_non_negative",
        ),
        CheckConstraint(
            f"length(code) BETWEEN {CODE_MIN_LENGTH} AND {CODE_MAX_LENGTH}",
            name="ck_coupons_code_length",
        ),
        Index("ix_coupons_is_active_is_used", "is_active", "is_used"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    code = Column(String(CODE_MAX_LENGTH), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=False, default="")

    discount_type = Column(String(20), nullable=False, default=DiscountType.PERCENTAGE.value)
    discount_value = Column(Numeric(12, 2), nullable=False)
    min_purchase = Column(Numeric(12, 2), nullable=False, default=0)
    max_discount = Column(Numeric(12, 2), nullable=True)

    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    is_used = Column(Boolean, nullable=False, default=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    used_by = Column(UUIDType, ForeignKey("users.id", ondelete="RESTRICT"), nullable=True)

    created_for = Column(
        UUIDType, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    order_trigger = Column(
        UUIDType, ForeignKey("orders.id", ondelete="RESTRICT"), nullable=True, unique=True
    )
    generation_type = Column(String(20), nullable=False, default=GenerationType.AUTOMATIC.value)

    # Analytics snapshot of the order that produced the coupon
    trigger_amount = Column(Numeric(12, 2), nullable=True)
    trigger_tier = Column(String(10), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


def normalize_code(code: str) -> str:
    """Return the canonical form of a coupon code.

    Raises:
        ValueError: If the code is not 6-20 alphanumeric characters.
    """
    normalized = code.strip().upper()
    if not CODE_MIN_LENGTH <= len(normalized) <= CODE_MAX_LENGTH:
        msg = f"Coupon code must be between {CODE_MIN_LENGTH} and {CODE_MAX_LENGTH} characters"
        raise ValueError(msg)
    if not normalized.isascii() or not normalized.isalnum():
        raise ValueError("Coupon code may only contain letters and digits")
    return normalized
