"""Coupon repository for data access."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import case, func, update
from sqlalchemy.orm import Query, Session

from app.core.sorting import apply_order_by
from app.models.coupon import Coupon, GenerationType, normalize_code
from app.schemas.coupon import CouponCreate


@dataclass
class TierStats:
    tier: str | None
    count: int
    used: int
    avg_trigger_amount: Decimal | None


class CouponRepository:
    """Repository for Coupon model."""

    def __init__(self, db: Session):
        self.db = db

    def _filtered(
        self,
        is_used: bool | None = None,
        is_active: bool | None = None,
        tier: str | None = None,
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(Coupon)
        if is_used is not None:
            query = query.filter(Coupon.is_used == is_used)
        if is_active is not None:
            query = query.filter(Coupon.is_active == is_active)
        if tier:
            query = query.filter(Coupon.trigger_tier == tier)
        return query

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
        is_used: bool | None = None,
        is_active: bool | None = None,
        tier: str | None = None,
    ) -> list[Coupon]:
        """Get all coupons with optional filters."""
        query = self._filtered(is_used=is_used, is_active=is_active, tier=tier)
        query = apply_order_by(query, Coupon, order_by)
        return query.offset(skip).limit(limit).all()

    def count(
        self,
        is_used: bool | None = None,
        is_active: bool | None = None,
        tier: str | None = None,
    ) -> int:
        """Count coupons matching the same filters as get_all."""
        return self._filtered(is_used=is_used, is_active=is_active, tier=tier).count()

    def get_by_id(self, coupon_id: UUID) -> Coupon | None:
        """Get a coupon by ID."""
        return self.db.query(Coupon).filter(Coupon.id == coupon_id).first()

    def get_by_code(self, code: str) -> Coupon | None:
        """Get a coupon by code, ignoring case and surrounding whitespace."""
        try:
            normalized = normalize_code(code)
        except ValueError:
            return None
        return self.db.query(Coupon).filter(Coupon.code == normalized).first()

    def code_exists(self, code: str) -> bool:
        """Check whether a code is already taken."""
        return (
            self.db.query(Coupon.id).filter(Coupon.code == code).first() is not None
        )

    def get_by_owner(self, user_id: UUID) -> list[Coupon]:
        """Get all coupons issued to a user, newest first."""
        return (
            self.db.query(Coupon)
            .filter(Coupon.created_for == user_id)
            .order_by(Coupon.created_at.desc())
            .all()
        )

    def get_by_order_trigger(self, order_id: UUID) -> Coupon | None:
        """Get the coupon an order's payment produced."""
        return self.db.query(Coupon).filter(Coupon.order_trigger == order_id).first()

    def add(self, coupon: Coupon) -> Coupon:
        """Stage a coupon in the current transaction without committing."""
        self.db.add(coupon)
        self.db.flush()
        return coupon

    def create(self, data: CouponCreate, code: str) -> Coupon:
        """Create a manually issued coupon."""
        coupon = Coupon(
            code=code,
            description=data.description,
            discount_type=data.discount_type.value,
            discount_value=data.discount_value,
            min_purchase=data.min_purchase,
            max_discount=data.max_discount,
            expires_at=data.expires_at,
            created_for=data.created_for,
            generation_type=GenerationType.MANUAL.value,
        )
        self.db.add(coupon)
        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def mark_used_if_available(self, coupon_id: UUID, user_id: UUID, now: datetime) -> bool:
        """Flip a coupon to used in a single conditional UPDATE.

        The row only changes while it is still active, unused and unexpired, so
        two concurrent redemptions cannot both succeed. The caller owns the
        commit.

        Returns:
            True if this call performed the transition.
        """
        result = self.db.execute(
            update(Coupon)
            .where(
                Coupon.id == coupon_id,
                Coupon.is_used.is_(False),
                Coupon.is_active.is_(True),
                Coupon.expires_at > now,
            )
            .values(is_used=True, used_at=now, used_by=user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    def deactivate(self, code: str) -> Coupon | None:
        """Switch a coupon off administratively."""
        coupon = self.get_by_code(code)
        if not coupon:
            return None

        coupon.is_active = False  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def count_active(self, now: datetime) -> int:
        """Count coupons that can still be redeemed."""
        return (
            self.db.query(func.count(Coupon.id))
            .filter(
                Coupon.is_active.is_(True),
                Coupon.is_used.is_(False),
                Coupon.expires_at > now,
            )
            .scalar()
            or 0
        )

    def count_expired_unused(self, now: datetime) -> int:
        """Count coupons that lapsed without being redeemed."""
        return (
            self.db.query(func.count(Coupon.id))
            .filter(Coupon.is_used.is_(False), Coupon.expires_at <= now)
            .scalar()
            or 0
        )

    def tier_stats(self) -> list[TierStats]:
        """Issued/used counts and average trigger amount per reward tier."""
        rows = (
            self.db.query(
                Coupon.trigger_tier,
                func.count(Coupon.id),
                func.sum(case((Coupon.is_used.is_(True), 1), else_=0)),
                func.avg(Coupon.trigger_amount),
            )
            .group_by(Coupon.trigger_tier)
            .order_by(Coupon.trigger_tier)
            .all()
        )
        return [
            TierStats(
                tier=tier,
                count=int(count),
                used=int(used or 0),
                avg_trigger_amount=Decimal(str(avg)) if avg is not None else None,
            )
            for tier, count, used, avg in rows
        ]
