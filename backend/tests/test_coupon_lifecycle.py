"""Tests for coupon redemption and deactivation."""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from app.core import database as db_module
from app.core.database import get_db
from app.models.coupon import Coupon, GenerationType
from app.repositories.coupon_repository import CouponRepository
from app.services.coupon_errors import (
    CouponAlreadyUsedError,
    CouponInvalidError,
    CouponNotFoundError,
    CouponNotOwnedError,
)
from app.services.coupon_lifecycle import CouponLifecycleService
from tests.conftest import NOW, create_user


@pytest.fixture
def db_session():
    """Create a database session for direct repository testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def owner(db_session):
    return create_user(db_session)


@pytest.fixture
def stranger(db_session):
    return create_user(db_session, name="Bruno Other", email="bruno@example.com")


@pytest.fixture
def coupon(db_session, owner):
    coupon = Coupon(
        code="SAVE10TEST123",
        description="Excellent! You earned 10% off",
        discount_type="percentage",
        discount_value=Decimal("10"),
        min_purchase=Decimal("0"),
        max_discount=Decimal("50"),
        expires_at=NOW + timedelta(days=10),
        created_for=owner.id,
        generation_type=GenerationType.MANUAL.value,
    )
    db_session.add(coupon)
    db_session.commit()
    db_session.refresh(coupon)
    return coupon


@pytest.fixture
def service(db_session, clock):
    return CouponLifecycleService(db_session, clock)


class TestMarkUsed:
    def test_marks_coupon_used(self, service, coupon, owner):
        used = service.mark_used(coupon.id, owner.id)
        assert used.is_used is True
        assert used.used_by == owner.id
        assert used.used_at is not None
        assert used.used_at.replace(tzinfo=None) == NOW.replace(tzinfo=None)

    def test_second_use_fails_and_keeps_first_redemption(self, service, coupon, owner, clock):
        first = service.mark_used(coupon.id, owner.id)
        used_at, used_by = first.used_at, first.used_by

        clock.advance(hours=1)
        with pytest.raises(CouponAlreadyUsedError):
            service.mark_used(coupon.id, owner.id)

        reloaded = CouponRepository(service.db).get_by_id(coupon.id)
        assert reloaded.used_at == used_at
        assert reloaded.used_by == used_by

    def test_unknown_coupon(self, service, owner):
        with pytest.raises(CouponNotFoundError):
            service.mark_used(uuid4(), owner.id)

    def test_not_owner(self, service, coupon, stranger):
        with pytest.raises(CouponNotOwnedError):
            service.mark_used(coupon.id, stranger.id)
        assert CouponRepository(service.db).get_by_id(coupon.id).is_used is False

    def test_expired(self, service, coupon, owner, clock):
        clock.advance(days=10)
        with pytest.raises(CouponInvalidError, match="expired"):
            service.mark_used(coupon.id, owner.id)

    def test_deactivated(self, service, coupon, owner):
        service.deactivate(coupon.code)
        with pytest.raises(CouponInvalidError, match="deactivated"):
            service.mark_used(coupon.id, owner.id)

    def test_concurrent_redemption_loses_to_committed_winner(
        self, db_session, service, coupon, owner
    ):
        """A session holding a stale 'unused' view cannot redeem a second time."""
        assert coupon.is_used is False

        other = db_module.SessionLocal()
        try:
            winner = CouponLifecycleService(other, service.clock).mark_used(coupon.id, owner.id)
            winner_used_at = winner.used_at
        finally:
            other.close()

        with pytest.raises(CouponAlreadyUsedError):
            service.mark_used(coupon.id, owner.id)

        db_session.refresh(coupon)
        assert coupon.is_used is True
        assert coupon.used_at == winner_used_at


class TestMarkUsedIfAvailable:
    def test_returns_false_when_already_used(self, db_session, coupon, owner):
        repo = CouponRepository(db_session)
        assert repo.mark_used_if_available(coupon.id, owner.id, NOW) is True
        db_session.commit()
        assert repo.mark_used_if_available(coupon.id, owner.id, NOW) is False

    def test_returns_false_when_expired(self, db_session, coupon, owner):
        repo = CouponRepository(db_session)
        assert repo.mark_used_if_available(coupon.id, owner.id, NOW + timedelta(days=10)) is False

    def test_returns_false_when_inactive(self, db_session, coupon, owner):
        coupon.is_active = False
        db_session.commit()
        assert CouponRepository(db_session).mark_used_if_available(coupon.id, owner.id, NOW) is False


class TestDeactivate:
    def test_deactivate_by_code_ignores_case(self, service, coupon):
        result = service.deactivate("  save10test123 ")
        assert result.id == coupon.id
        assert result.is_active is False

    def test_deactivate_unknown(self, service):
        with pytest.raises(CouponNotFoundError):
            service.deactivate("NOPE000000")

    def test_deactivating_used_coupon_keeps_it_used(self, service, coupon, owner):
        service.mark_used(coupon.id, owner.id)
        result = service.deactivate(coupon.code)
        assert result.is_used is True
        assert result.is_active is False
