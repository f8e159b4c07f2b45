"""
Stair-step rank tasks.

Month-end evaluation of every member with sales and reversion of ranks
that did not qualify. Both runs are guarded by a distributed lock.
"""

from collections.abc import Awaitable, Callable
from datetime import date

import dramatiq
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.operational_constants import (
    BLOCKING_TIMEOUT_SHORT,
    DRAMATIQ_TIME_LIMIT_LONG,
    LOCK_TIMEOUT_LONG,
)
from app.services.stair_step import RankManager
from app.utils.datetime_utils import previous_month
from app.utils.distributed_lock import get_distributed_lock
from app.utils.redis_utils import get_redis_client
from jobs.async_runner import create_local_session, run_async


def resolve_month(month: str | None) -> date:
    """ISO date string, or the previous month when None."""
    return date.fromisoformat(month) if month else previous_month()


@dramatiq.actor(max_retries=3, time_limit=DRAMATIQ_TIME_LIMIT_LONG)
def evaluate_all_ranks(month: str | None = None) -> None:
    """
    Evaluate ranks of every member with sales in ``month``.

    Args:
        month: Any day of the month as ISO date (previous month when None)
    """
    target = resolve_month(month)
    logger.info(f"Evaluating stair-step ranks for {target:%Y-%m}")
    qualified = run_async(_run_locked("rank_evaluation", _evaluate, target))
    if qualified is not None:
        logger.info(f"Rank evaluation {target:%Y-%m}: {qualified} qualified")


@dramatiq.actor(max_retries=3, time_limit=DRAMATIQ_TIME_LIMIT_LONG)
def process_monthly_rank_reversion(month: str | None = None) -> None:
    """
    Revert unfixed ranks that did not qualify in ``month``.

    Args:
        month: Any day of the month as ISO date (previous month when None)
    """
    target = resolve_month(month)
    reverted = run_async(_run_locked("rank_reversion", _revert, target))
    if reverted is not None:
        logger.info(f"Rank reversion {target:%Y-%m}: {reverted} reverted")


async def _evaluate(session: AsyncSession, month: date) -> int:
    return await RankManager(session).evaluate_all(month)


async def _revert(session: AsyncSession, month: date) -> int:
    return await RankManager(session).process_monthly_reversion(month)


async def _run_locked(
    name: str,
    func: Callable[[AsyncSession, date], Awaitable[int]],
    month: date,
) -> int | None:
    redis_client = get_redis_client()
    lock = get_distributed_lock(redis_client)
    try:
        async with lock.lock(
            f"{name}:{month.isoformat()}",
            timeout=LOCK_TIMEOUT_LONG,
            blocking_timeout=BLOCKING_TIMEOUT_SHORT,
        ) as acquired:
            if not acquired:
                logger.warning(f"{name} for {month:%Y-%m} already running, skipping")
                return None
            async with create_local_session() as session:
                return await func(session, month)
    finally:
        await redis_client.aclose()
