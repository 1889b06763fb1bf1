from app.schemas.coupon import (
    ApplyCouponRequest,
    ApplyCouponResponse,
    CouponCreate,
    CouponResponse,
    CouponStatsResponse,
    CouponValidationResponse,
    DiscountResultResponse,
    MyCouponsResponse,
)
from app.schemas.order import (
    AppliedCouponResponse,
    OrderCreate,
    OrderItemCreate,
    OrderPayRequest,
    OrderResponse,
)
from app.schemas.user import UserCreate, UserResponse

__all__ = [
    "AppliedCouponResponse",
    "ApplyCouponRequest",
    "ApplyCouponResponse",
    "CouponCreate",
    "CouponResponse",
    "CouponStatsResponse",
    "CouponValidationResponse",
    "DiscountResultResponse",
    "MyCouponsResponse",
    "OrderCreate",
    "OrderItemCreate",
    "OrderPayRequest",
    "OrderResponse",
    "UserCreate",
    "UserResponse",
]
