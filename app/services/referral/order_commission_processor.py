"""
Order commission processor.

Builds a commission pool from the commission rate of every order item
and splits it 50/30/20 between the buyer's first three uplines.
"""

from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    ORDER_COMMISSION_DEPTH,
    ORDER_COMMISSION_SHARES,
)
from app.models.enums import CommissionStatus, CommissionType
from app.models.order import Order
from app.repositories.commission_repository import CommissionRepository
from app.repositories.order_repository import OrderRepository
from app.services.base_service import BaseService, transaction
from app.services.referral.chain_manager import ReferralChainManager
from app.services.referral.unilevel_distributor import ProcessResult
from app.utils.exceptions import NotFoundError

CENT = Decimal("0.01")


def order_commission_pool(order: Order) -> Decimal:
    """Sum of ``total_price * commission_percentage / 100`` over items."""
    return sum(
        (
            (item.total_price or Decimal("0"))
            * (item.commission_percentage or Decimal("0"))
            / 100
            for item in order.items
        ),
        Decimal("0"),
    )


class OrderCommissionProcessor(BaseService):
    """Distributes order commissions (3 levels)."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.chain = ReferralChainManager(session)
        self.order_repo = OrderRepository(session)
        self.commission_repo = CommissionRepository(session)

    @transaction
    async def process_order(self, order_id: int) -> ProcessResult:
        """
        Distribute commissions of one order.

        Orders already processed are skipped.

        Args:
            order_id: Order to process

        Returns:
            ProcessResult (``skipped`` when already distributed)

        Raises:
            NotFoundError: Unknown order
        """
        order = await self.order_repo.get_for_update(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")

        if order.commissions_distributed or await self.commission_repo.exists_for_order(
            order_id
        ):
            self.logger.info(
                "Order commissions already distributed",
                extra={"order_id": order_id},
            )
            return ProcessResult(success=True, skipped=True)

        await self.session.refresh(order, attribute_names=["items"])
        pool = order_commission_pool(order)
        result = ProcessResult(success=True)

        if pool > 0:
            upline = await self.chain.get_upline_ids(
                order.user_id, ORDER_COMMISSION_DEPTH
            )
            for level, upline_id in enumerate(upline, start=1):
                share = ORDER_COMMISSION_SHARES[level]
                amount = (pool * share / 100).quantize(CENT, rounding=ROUND_HALF_UP)
                if amount <= 0:
                    continue
                commission = await self.commission_repo.create(
                    user_id=upline_id,
                    from_user_id=order.user_id,
                    order_id=order.id,
                    amount=amount,
                    percentage=share,
                    level=level,
                    commission_type=CommissionType.ORDER,
                    status=CommissionStatus.PENDING,
                )
                result.commissions.append(commission)
                result.total_distributed += amount

        order.commissions_distributed = True
        await self.session.flush()

        result.commissions_count = len(result.commissions)
        self.logger.info(
            "Order commissions distributed",
            extra={
                "order_id": order_id,
                "pool": str(pool),
                "count": result.commissions_count,
                "total": str(result.total_distributed),
            },
        )
        return result
