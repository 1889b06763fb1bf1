from app.models.applied_coupon import AppliedCoupon
from app.models.coupon import Coupon, CouponState, DiscountType, GenerationType
from app.models.order import Order, OrderItem, OrderStatus
from app.models.user import User

__all__ = [
    "AppliedCoupon",
    "Coupon",
    "CouponState",
    "DiscountType",
    "GenerationType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "User",
]
