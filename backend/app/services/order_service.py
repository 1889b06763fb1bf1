"""Order placement, payment and delivery."""

import logging
import random
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.clock import Clock, system_clock
from app.models.coupon import Coupon, CouponState
from app.models.order import Order
from app.repositories.applied_coupon_repository import AppliedCouponRepository
from app.repositories.coupon_repository import CouponRepository
from app.repositories.order_repository import OrderRepository
from app.schemas.order import OrderCreate
from app.services.coupon_errors import (
    CouponAlreadyUsedError,
    CouponError,
    CouponInvalidError,
    CouponMinimumNotMetError,
    CouponNotFoundError,
    CouponNotOwnedError,
)
from app.services.coupon_lifecycle import CouponLifecycleService, coupon_state
from app.services.coupon_service import CouponRewardService
from app.services.discount_calculator import calculate_discount
from app.services.order_totals import calculate_order_totals, items_price_for

logger = logging.getLogger(__name__)


class OrderService:
    """Service for the order side of the coupon engine."""

    def __init__(
        self,
        db: Session,
        clock: Clock = system_clock,
        rng: random.Random | None = None,
    ):
        self.db = db
        self.clock = clock
        self.order_repo = OrderRepository(db)
        self.coupon_repo = CouponRepository(db)
        self.applied_coupon_repo = AppliedCouponRepository(db)
        self.lifecycle = CouponLifecycleService(db, clock)
        self.rewards = CouponRewardService(db, clock, rng)

    def create_order(self, user_id: UUID, data: OrderCreate) -> Order:
        """Place an order, optionally spending one coupon on it.

        The order, the coupon snapshot and the coupon's used flag are committed
        together; if the coupon is rejected nothing is written.

        Raises:
            CouponError: If the coupon code cannot be applied.
        """
        items_price = items_price_for(data.items)
        try:
            order = self.order_repo.add(user_id, data)
            discount = Decimal("0")
            if data.coupon_code:
                subtotal = items_price + data.shipping_price
                discount = self._apply_coupon(order, user_id, data.coupon_code, subtotal)

            totals = calculate_order_totals(items_price, data.shipping_price, discount)
            order.items_price = totals.items_price  # type: ignore[assignment]
            order.shipping_price = totals.shipping_price  # type: ignore[assignment]
            order.subtotal = totals.subtotal  # type: ignore[assignment]
            order.discount_amount = totals.discount_amount  # type: ignore[assignment]
            order.tax_price = totals.tax_price  # type: ignore[assignment]
            order.total_price = totals.total_price  # type: ignore[assignment]
            self.db.commit()
        except CouponError:
            self.db.rollback()
            raise

        self.db.refresh(order)
        logger.info("Order %s created for user %s", order.id, user_id)
        return order

    def _apply_coupon(
        self, order: Order, user_id: UUID, code: str, subtotal: Decimal
    ) -> Decimal:
        coupon = self.coupon_repo.get_by_code(code)
        if not coupon:
            raise CouponNotFoundError("Coupon not found")
        if coupon.created_for != user_id:
            raise CouponNotOwnedError("This coupon does not belong to you")

        result = calculate_discount(coupon, subtotal, self.clock.now())
        if not result.is_valid:
            raise self._rejection(coupon, subtotal, result.reason or "Invalid coupon")

        self.lifecycle.consume(coupon, user_id)
        self.applied_coupon_repo.add(order.id, coupon, result.discount)  # type: ignore[arg-type]
        logger.info("Coupon %s applied to order %s: -%s", coupon.code, order.id, result.discount)
        return result.discount

    def _rejection(self, coupon: Coupon, subtotal: Decimal, reason: str) -> CouponError:
        state = coupon_state(coupon, self.clock.now())
        if state == CouponState.USED:
            return CouponAlreadyUsedError(reason)
        if state != CouponState.ACTIVE or subtotal <= 0:
            return CouponInvalidError(reason)
        return CouponMinimumNotMetError(reason)

    def mark_paid(
        self, order: Order, payment_result: dict[str, Any]
    ) -> tuple[Order, Coupon | None]:
        """Confirm payment, then try to issue the order's reward coupon.

        Payment is committed before issuance is attempted, and issuance errors
        are absorbed, so a paid order stays paid. Calling this again on a paid
        order leaves the payment untouched and retries issuance, which is a
        no-op once the order has its coupon.

        Returns:
            The order and the coupon issued by this call, if any.
        """
        if not order.is_paid:
            order = self.order_repo.mark_paid(order, payment_result, self.clock.now())
            logger.info("Order %s paid", order.id)

        coupon = self.rewards.generate_coupon_for_order(order)
        self.db.refresh(order)
        return order, coupon

    def mark_delivered(self, order: Order) -> Order:
        """Record that an order reached its customer."""
        order = self.order_repo.mark_delivered(order, self.clock.now())
        logger.info("Order %s delivered", order.id)
        return order
