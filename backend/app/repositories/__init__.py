from app.repositories.applied_coupon_repository import AppliedCouponRepository
from app.repositories.coupon_repository import CouponRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.user_repository import UserRepository

__all__ = [
    "AppliedCouponRepository",
    "CouponRepository",
    "OrderRepository",
    "UserRepository",
]
