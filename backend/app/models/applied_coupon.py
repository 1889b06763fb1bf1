"""AppliedCoupon model: the coupon terms frozen onto an order."""

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class AppliedCoupon(Base):
    """Snapshot of a coupon taken when it was spent on an order.

    Rows are written once and never updated, so later changes to the coupon
    record do not alter what the order was charged.
    """

    __tablename__ = "applied_coupons"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    order_id = Column(
        UUIDType, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    coupon_id = Column(
        UUIDType, ForeignKey("coupons.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    code = Column(String(20), nullable=False, index=True)
    discount_type = Column(String(20), nullable=False)
    discount_value = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
