import logging
from typing import Any
from uuid import UUID

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings
from arq.jobs import Job

from app.core.config import settings

logger = logging.getLogger(__name__)

# Redis connection settings
redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)


async def get_redis_pool() -> ArqRedis:
    """Get or create Redis pool for arq"""
    return await create_pool(redis_settings)


async def enqueue_task(task_name: str, *args: Any, **kwargs: Any) -> Job:
    """
    Enqueue a task to the arq worker.

    Args:
        task_name: Name of the task function
        *args: Positional arguments for the task
        **kwargs: Keyword arguments for the task

    Returns:
        Job object from arq
    """
    pool = await get_redis_pool()
    try:
        job = await pool.enqueue_job(task_name, *args, **kwargs)
        return job  # type: ignore[return-value]
    finally:
        await pool.close()


async def enqueue_coupon_email(coupon_id: UUID, base_amount: str) -> Job | None:
    """Queue the reward coupon notification.

    Runs after the issuing transaction has committed. A queue outage is logged
    and otherwise ignored; the coupon stays valid without its email.
    """
    if not settings.COUPON_EMAIL_ENABLED:
        return None
    try:
        return await enqueue_task("send_coupon_email_task", str(coupon_id), base_amount)
    except Exception:
        logger.exception("Failed to enqueue coupon email for coupon %s", coupon_id)
        return None
