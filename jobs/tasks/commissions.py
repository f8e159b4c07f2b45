"""
Commission tasks.

Distributes order commissions and purchase commissions (unilevel,
stair-step and monthly sales) outside the request cycle.
"""

import dramatiq
from dramatiq.errors import DramatiqError
from loguru import logger
from redis.exceptions import RedisError

from app.config.operational_constants import (
    DRAMATIQ_TIME_LIMIT_SHORT,
    LOCK_TIMEOUT_MEDIUM,
)
from app.services.purchase_commission_service import (
    PurchaseCommissionResult,
    PurchaseCommissionService,
)
from app.services.referral import OrderCommissionProcessor, ProcessResult
from app.utils.distributed_lock import get_distributed_lock
from app.utils.redis_utils import get_redis_client
from jobs.async_runner import create_local_session, run_async


@dramatiq.actor(max_retries=3, time_limit=DRAMATIQ_TIME_LIMIT_SHORT)
def distribute_order_commissions(order_id: int) -> None:
    """
    Distribute the 3-level commissions of one order.

    Safe to retry: processed orders are skipped.

    Args:
        order_id: Order to process
    """
    logger.info(f"Distributing commissions for order {order_id}")
    result = run_async(_distribute_order_async(order_id))
    if result.skipped:
        logger.info(f"Order {order_id} already processed")
    else:
        logger.info(
            f"Order {order_id}: {result.commissions_count} commissions, "
            f"total {result.total_distributed}"
        )


async def _distribute_order_async(order_id: int) -> ProcessResult:
    redis_client = get_redis_client()
    lock = get_distributed_lock(redis_client)
    try:
        async with lock.lock(
            f"order_commissions:{order_id}", timeout=LOCK_TIMEOUT_MEDIUM
        ) as acquired:
            if not acquired:
                # Retries middleware re-enqueues the message
                raise RuntimeError(f"Order {order_id} is locked by another worker")
            async with create_local_session() as session:
                return await OrderCommissionProcessor(session).process_order(order_id)
    finally:
        await redis_client.aclose()


@dramatiq.actor(max_retries=3, time_limit=DRAMATIQ_TIME_LIMIT_SHORT)
def distribute_purchase_commissions(purchase_id: int) -> None:
    """
    Distribute commissions of an approved purchase.

    Safe to retry: the purchase row marks its commissions as paid.

    Args:
        purchase_id: Approved purchase
    """
    result = run_async(_distribute_purchase_async(purchase_id))
    if result is None:
        logger.info(f"Purchase {purchase_id} commissions already distributed")
        return

    logger.info(
        f"Purchase {purchase_id} commissions: "
        f"unilevel {result.unilevel.total_distributed}, "
        f"stair-step {result.stair_step.total}"
    )


async def _distribute_purchase_async(
    purchase_id: int,
) -> PurchaseCommissionResult | None:
    async with create_local_session() as session:
        return await PurchaseCommissionService(session).distribute_for_purchase(
            purchase_id
        )


def enqueue_purchase_commissions(purchase_id: int) -> bool:
    """
    Queue the commissions of an approved purchase.

    Returns:
        False when the broker is unreachable; the admin re-trigger route
        pays them later
    """
    try:
        distribute_purchase_commissions.send(purchase_id)
    except (DramatiqError, RedisError) as e:
        logger.error(
            "Could not enqueue purchase commissions",
            extra={"purchase_id": purchase_id, "error": str(e)},
        )
        return False
    return True
