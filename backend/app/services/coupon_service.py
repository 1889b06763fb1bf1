"""Reward coupon issuance tied to paid orders."""

import logging
import random
from datetime import timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import Clock, system_clock
from app.models.coupon import Coupon, DiscountType, GenerationType
from app.models.order import Order
from app.models.shared import to_money
from app.repositories.coupon_repository import CouponRepository
from app.repositories.order_repository import OrderRepository
from app.schemas.coupon import CouponCreate
from app.services.coupon_codes import MAX_CODE_ATTEMPTS, CouponCodeGenerator, tier_prefix
from app.services.coupon_errors import (
    CodeGenerationExhaustedError,
    CouponAlreadyGeneratedError,
    CouponCodeTakenError,
    CouponNotEarnedError,
)
from app.services.coupon_tiers import QUALIFYING_MINIMUM, resolve_tier

logger = logging.getLogger(__name__)

COUPON_VALIDITY_DAYS = 10


def coupon_base_amount(order: Any) -> Decimal:
    """Amount used for tier lookup: items plus shipping, before tax and discount."""
    return to_money(Decimal(str(order.items_price)) + Decimal(str(order.shipping_price)))


def qualifies_for_coupon(order: Any) -> bool:
    """Whether a paid order should earn a reward coupon now."""
    if not order.is_paid:
        return False
    if order.coupon_generated:
        return False
    return coupon_base_amount(order) >= QUALIFYING_MINIMUM


class CouponRewardService:
    """Service for issuing reward coupons."""

    def __init__(
        self,
        db: Session,
        clock: Clock = system_clock,
        rng: random.Random | None = None,
    ):
        self.db = db
        self.clock = clock
        self.coupon_repo = CouponRepository(db)
        self.order_repo = OrderRepository(db)
        self.code_generator = CouponCodeGenerator(self.coupon_repo.code_exists, clock, rng)

    def issue_automatic_coupon(
        self,
        user_id: UUID,
        order_id: UUID,
        base_amount: Decimal | int | float | str,
    ) -> Coupon | None:
        """Mint the reward coupon an order's base amount earns.

        The coupon insert and the order's ``coupon_generated`` flag are committed
        together, and the flag only flips if it was still unset, so an order
        never produces two coupons.

        Returns:
            The new coupon, or None if the amount earns no tier.

        Raises:
            CouponAlreadyGeneratedError: If the order already produced a coupon.
            CodeGenerationExhaustedError: If no unique code could be found.
            IntegrityError: For constraint failures other than a code collision.
        """
        tier = resolve_tier(base_amount)
        if tier is None:
            return None

        prefix = tier_prefix(tier.discount_value)
        for _ in range(MAX_CODE_ATTEMPTS):
            issued_at = self.clock.now()
            coupon = Coupon(
                code=self.code_generator.generate_unique_code(prefix),
                description=tier.description,
                discount_type=DiscountType.PERCENTAGE.value,
                discount_value=tier.discount_value,
                # Rewards are spendable on any later order, whatever its size.
                min_purchase=Decimal("0"),
                max_discount=tier.max_discount,
                expires_at=issued_at + timedelta(days=COUPON_VALIDITY_DAYS),
                created_for=user_id,
                order_trigger=order_id,
                generation_type=GenerationType.AUTOMATIC.value,
                trigger_amount=to_money(base_amount),
                trigger_tier=tier.tier,
            )
            try:
                self.coupon_repo.add(coupon)
                if not self.order_repo.mark_coupon_generated_if_unset(order_id, coupon.id):  # type: ignore[arg-type]
                    self.db.rollback()
                    raise CouponAlreadyGeneratedError(
                        f"Order {order_id} has already generated a coupon"
                    )
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                if self.coupon_repo.get_by_order_trigger(order_id):
                    raise CouponAlreadyGeneratedError(
                        f"Order {order_id} has already generated a coupon"
                    ) from None
                if not self.coupon_repo.code_exists(coupon.code):  # type: ignore[arg-type]
                    raise
                logger.warning("Coupon code %s collided on insert, retrying", coupon.code)
                continue

            self.db.refresh(coupon)
            logger.info(
                "Issued %s reward coupon %s to user %s for order %s",
                tier.tier,
                coupon.code,
                user_id,
                order_id,
            )
            return coupon

        raise CodeGenerationExhaustedError(
            f"Could not insert a unique coupon code after {MAX_CODE_ATTEMPTS} attempts"
        )

    def generate_coupon_for_order(self, order: Order) -> Coupon | None:
        """Best-effort reward issuance after payment.

        Never raises: a failure here must not undo or block the payment, so it
        is logged and reported as None.
        """
        if not qualifies_for_coupon(order):
            return None

        order_id = order.id
        try:
            return self.issue_automatic_coupon(
                order.user_id,  # type: ignore[arg-type]
                order_id,  # type: ignore[arg-type]
                coupon_base_amount(order),
            )
        except CouponAlreadyGeneratedError:
            logger.info("Order %s already generated its coupon, skipping", order_id)
        except Exception:
            self.db.rollback()
            logger.exception("Failed to generate reward coupon for order %s", order_id)
        return None

    def force_generate_for_order(self, order: Order) -> Coupon:
        """Administrative issuance for a paid order that missed its reward.

        Raises:
            CouponNotEarnedError: If the order is unpaid or below the minimum.
            CouponAlreadyGeneratedError: If the order already produced a coupon.
            CodeGenerationExhaustedError: If no unique code could be found.
        """
        if not order.is_paid:
            raise CouponNotEarnedError("Order must be paid to generate coupon")
        if order.coupon_generated:
            raise CouponAlreadyGeneratedError(f"Order {order.id} has already generated a coupon")

        base_amount = coupon_base_amount(order)
        coupon = self.issue_automatic_coupon(
            order.user_id,  # type: ignore[arg-type]
            order.id,  # type: ignore[arg-type]
            base_amount,
        )
        if coupon is None:
            raise CouponNotEarnedError("Order amount too low for coupon generation")
        return coupon

    def create_manual_coupon(self, data: CouponCreate) -> Coupon:
        """Issue a coupon by hand, generating a code when none is given.

        Raises:
            CouponCodeTakenError: If the requested code is already taken.
            CodeGenerationExhaustedError: If no unique code could be found.
        """
        if data.code:
            if self.coupon_repo.code_exists(data.code):
                raise CouponCodeTakenError(f"Coupon code {data.code} already exists")
            code = data.code
        else:
            code = self.code_generator.generate_unique_code()

        try:
            coupon = self.coupon_repo.create(data, code)
        except IntegrityError:
            self.db.rollback()
            raise CouponCodeTakenError(f"Coupon code {code} already exists") from None

        logger.info("Issued manual coupon %s to user %s", coupon.code, coupon.created_for)
        return coupon
