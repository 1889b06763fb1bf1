"""Coupon validity classification and the one-time "used" transition."""

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.clock import Clock, ensure_aware, system_clock
from app.models.coupon import Coupon, CouponState
from app.repositories.coupon_repository import CouponRepository
from app.services.coupon_errors import (
    CouponAlreadyUsedError,
    CouponInvalidError,
    CouponNotFoundError,
    CouponNotOwnedError,
)

logger = logging.getLogger(__name__)


def coupon_state(coupon: Any, now: datetime) -> CouponState:
    """Classify a coupon at ``now``.

    Used wins over expired, and expired over deactivated. Expiry is computed
    on read; nothing is stored when a coupon lapses.
    """
    if coupon.is_used:
        return CouponState.USED
    if now >= ensure_aware(coupon.expires_at):
        return CouponState.EXPIRED
    if not coupon.is_active:
        return CouponState.DEACTIVATED
    return CouponState.ACTIVE


def is_coupon_valid(coupon: Any, now: datetime) -> bool:
    """True iff the coupon is active, unused and not yet expired."""
    return coupon_state(coupon, now) == CouponState.ACTIVE


def _raise_for_state(coupon: Coupon, state: CouponState) -> None:
    if state == CouponState.USED:
        raise CouponAlreadyUsedError(f"Coupon {coupon.code} has already been used")
    if state == CouponState.EXPIRED:
        raise CouponInvalidError(f"Coupon {coupon.code} has expired")
    if state == CouponState.DEACTIVATED:
        raise CouponInvalidError(f"Coupon {coupon.code} has been deactivated")


class CouponLifecycleService:
    """Service for moving coupons to their terminal "used" state."""

    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock
        self.coupon_repo = CouponRepository(db)

    def consume(self, coupon: Coupon, user_id: UUID) -> None:
        """Mark a coupon used inside the caller's transaction.

        Validity is checked first for a precise error, then enforced again by
        the conditional UPDATE. The caller commits.

        Raises:
            CouponNotOwnedError: If ``user_id`` does not own the coupon.
            CouponAlreadyUsedError: If the coupon is, or concurrently became, used.
            CouponInvalidError: If the coupon is expired or deactivated.
        """
        if coupon.created_for != user_id:
            raise CouponNotOwnedError("This coupon does not belong to you")

        now = self.clock.now()
        _raise_for_state(coupon, coupon_state(coupon, now))

        if not self.coupon_repo.mark_used_if_available(coupon.id, user_id, now):  # type: ignore[arg-type]
            # Lost a race: reload and report what the winner left behind.
            self.db.refresh(coupon)
            logger.warning("Concurrent redemption of coupon %s rejected", coupon.code)
            _raise_for_state(coupon, coupon_state(coupon, now))
            raise CouponAlreadyUsedError(f"Coupon {coupon.code} has already been used")

    def mark_used(self, coupon_id: UUID, user_id: UUID) -> Coupon:
        """Redeem a coupon on behalf of its owner.

        Returns:
            The coupon in its used state.

        Raises:
            CouponNotFoundError: If no coupon has this ID.
            CouponNotOwnedError, CouponAlreadyUsedError, CouponInvalidError:
                See ``consume``.
        """
        coupon = self.coupon_repo.get_by_id(coupon_id)
        if not coupon:
            raise CouponNotFoundError(f"Coupon {coupon_id} not found")

        try:
            self.consume(coupon, user_id)
        except Exception:
            self.db.rollback()
            raise

        self.db.commit()
        self.db.refresh(coupon)
        logger.info("Coupon %s used by %s", coupon.code, user_id)
        return coupon

    def deactivate(self, code: str) -> Coupon:
        """Switch a coupon off. Used coupons stay used.

        Raises:
            CouponNotFoundError: If no coupon has this code.
        """
        coupon = self.coupon_repo.deactivate(code)
        if not coupon:
            raise CouponNotFoundError(f"Coupon '{code}' not found")
        logger.info("Coupon %s deactivated", coupon.code)
        return coupon
