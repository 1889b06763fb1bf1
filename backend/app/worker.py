import logging
from typing import Any
from uuid import UUID

from arq import cron

from app.core.clock import system_clock
from app.core.database import SessionLocal
from app.repositories.coupon_repository import CouponRepository
from app.repositories.user_repository import UserRepository
from app.services.email_service import EmailService
from app.tasks import redis_settings

logger = logging.getLogger(__name__)


async def send_coupon_email_task(ctx: dict[str, Any], coupon_id: str, base_amount: str) -> bool:
    """Background task: email a user the reward coupon their order earned.

    Failures stay inside the task; they never reach the order or payment flow.

    Args:
        ctx: ARQ worker context.
        coupon_id: UUID string of the issued coupon.
        base_amount: Order amount that earned the reward.

    Returns:
        True if the email was sent.
    """
    db = SessionLocal()
    try:
        coupon = CouponRepository(db).get_by_id(UUID(coupon_id))
        if not coupon:
            logger.warning("Coupon %s not found for notification", coupon_id)
            return False

        user = UserRepository(db).get_by_id(coupon.created_for)  # type: ignore[arg-type]
        if not user:
            logger.warning("Owner of coupon %s not found for notification", coupon.code)
            return False

        try:
            return await EmailService().send_coupon_email(user, coupon, base_amount)
        except Exception:
            logger.exception("Failed to send coupon email for coupon %s", coupon.code)
            return False
    finally:
        db.close()


async def report_coupon_expirations_task(ctx: dict[str, Any]) -> int:
    """Background task: log how many coupons lapsed without being used.

    Runs daily. Expiry itself is computed on read; this only reports it.
    """
    db = SessionLocal()
    try:
        count = CouponRepository(db).count_expired_unused(system_clock.now())
        if count > 0:
            logger.info("%d reward coupons expired unused", count)
        return count
    finally:
        db.close()


class WorkerSettings:
    functions = [
        send_coupon_email_task,
        report_coupon_expirations_task,
    ]
    cron_jobs = [
        cron(report_coupon_expirations_task, hour=0, minute=0),  # daily at midnight
    ]
    redis_settings = redis_settings
