"""AppliedCoupon repository for data access."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.applied_coupon import AppliedCoupon
from app.models.coupon import Coupon


class AppliedCouponRepository:
    """Repository for AppliedCoupon model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_order_id(self, order_id: UUID) -> AppliedCoupon | None:
        """Get the coupon snapshot stored on an order."""
        return self.db.query(AppliedCoupon).filter(AppliedCoupon.order_id == order_id).first()

    def add(self, order_id: UUID, coupon: Coupon, discount_amount: Decimal) -> AppliedCoupon:
        """Stage a snapshot of the coupon's terms without committing."""
        applied_coupon = AppliedCoupon(
            order_id=order_id,
            coupon_id=coupon.id,
            code=coupon.code,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            discount_amount=discount_amount,
        )
        self.db.add(applied_coupon)
        self.db.flush()
        return applied_coupon
