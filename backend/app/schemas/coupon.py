"""Coupon schemas."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.core.clock import ensure_aware
from app.models.coupon import CODE_MAX_LENGTH, DiscountType, normalize_code


class CouponCreate(BaseModel):
    """Administrative (manual) coupon issuance."""

    created_for: UUID
    code: str | None = Field(default=None, max_length=CODE_MAX_LENGTH)
    discount_type: DiscountType = DiscountType.PERCENTAGE
    discount_value: Decimal = Field(..., ge=0)
    min_purchase: Decimal = Field(default=Decimal("0"), ge=0)
    max_discount: Decimal | None = Field(default=None, ge=0)
    expires_at: datetime
    description: str = ""

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return normalize_code(v)

    @field_validator("expires_at")
    @classmethod
    def validate_expires_at(cls, v: datetime) -> datetime:
        """Stored as UTC; the database keeps wall time only."""
        return ensure_aware(v).astimezone(UTC)

    @model_validator(mode="after")
    def validate_percentage_range(self) -> Self:
        """Percentage coupons cannot take more than the whole order."""
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class CouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    description: str
    discount_type: str
    discount_value: Decimal
    min_purchase: Decimal
    max_discount: Decimal | None = None
    expires_at: datetime
    is_active: bool
    is_used: bool
    used_at: datetime | None = None
    used_by: UUID | None = None
    created_for: UUID
    order_trigger: UUID | None = None
    generation_type: str
    trigger_amount: Decimal | None = None
    trigger_tier: str | None = None
    created_at: datetime
    updated_at: datetime


class MyCouponsResponse(BaseModel):
    valid: list[CouponResponse]
    expired: list[CouponResponse]
    total: int
    valid_count: int


class CouponSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    discount_type: str
    discount_value: Decimal
    min_purchase: Decimal
    max_discount: Decimal | None = None
    expires_at: datetime
    description: str
    is_used: bool
    used_at: datetime | None = None


class DiscountResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_valid: bool
    reason: str | None = None
    discount: Decimal
    discount_type: str | None = None
    discount_value: Decimal | None = None
    final_total: Decimal | None = None


class CouponValidationResponse(BaseModel):
    message: str
    valid: bool
    coupon: CouponSummary
    discount: DiscountResultResponse | None = None


class ApplyCouponRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=CODE_MAX_LENGTH)
    order_total: Decimal = Field(..., gt=0)


class ApplyCouponResponse(BaseModel):
    message: str
    code: str
    description: str
    original_total: Decimal
    discount: Decimal
    final_total: Decimal
    discount_value: Decimal


class UseCouponResponse(BaseModel):
    message: str
    coupon: CouponResponse


class CouponStatsOverview(BaseModel):
    total: int
    used: int
    active: int
    expired: int
    usage_rate: Decimal


class CouponTierStats(BaseModel):
    tier: str | None = None
    count: int
    used: int
    avg_trigger_amount: Decimal | None = None


class CouponStatsResponse(BaseModel):
    """Analytics over all issued coupons."""

    overview: CouponStatsOverview
    by_tier: list[CouponTierStats]
