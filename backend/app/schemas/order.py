"""Order schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.coupon import CODE_MAX_LENGTH


class OrderItemCreate(BaseModel):
    product_name: str = Field(..., min_length=1, max_length=255)
    product_sku: str | None = Field(default=None, max_length=100)
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)


class ShippingAddress(BaseModel):
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)


class OrderCreate(BaseModel):
    items: list[OrderItemCreate] = Field(..., min_length=1)
    shipping: ShippingAddress | None = None
    shipping_price: Decimal = Field(default=Decimal("0"), ge=0)
    payment_method: str | None = Field(default=None, max_length=50)
    coupon_code: str | None = Field(default=None, max_length=CODE_MAX_LENGTH)


class OrderPayRequest(BaseModel):
    """Result reported by the payment provider."""

    id: str | None = None
    status: str | None = None
    update_time: str | None = None
    email_address: str | None = None
    payer_id: str | None = None

    def to_payment_result(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_name: str
    product_sku: str | None = None
    quantity: int
    unit_price: Decimal


class AppliedCouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    coupon_id: UUID
    code: str
    discount_type: str
    discount_value: Decimal
    discount_amount: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    items: list[OrderItemResponse] = Field(default_factory=list)
    shipping_address: str | None = None
    shipping_city: str | None = None
    shipping_postal_code: str | None = None
    shipping_country: str | None = None
    payment_method: str | None = None
    payment_result: dict[str, Any] | None = None
    items_price: Decimal
    shipping_price: Decimal
    subtotal: Decimal
    discount_amount: Decimal
    tax_price: Decimal
    total_price: Decimal
    applied_coupon: AppliedCouponResponse | None = None
    status: str
    is_paid: bool
    paid_at: datetime | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    coupon_generated: bool
    generated_coupon_id: UUID | None = None
    created_at: datetime
    updated_at: datetime


class GeneratedCouponResponse(BaseModel):
    message: str
    code: str
    discount_value: Decimal
    expires_at: datetime
