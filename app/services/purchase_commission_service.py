"""
Purchase commission service.

One approved purchase pays unilevel commissions, pays stair-step
commissions and counts toward monthly sales, all in one transaction.
The purchase row records that its commissions were paid, so a repeated
run pays nothing.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import PurchaseStatus
from app.repositories.binary_repository import BinaryPurchaseRepository
from app.services.base_service import BaseService, log_operation, transaction
from app.services.referral.unilevel_distributor import (
    ProcessResult,
    UnilevelDistributor,
)
from app.services.stair_step.commission_distributor import (
    DistributionResult,
    StairStepCommissionDistributor,
)
from app.services.stair_step.sales_tracker import SalesTracker
from app.utils.exceptions import ConflictError, NotFoundError


@dataclass
class PurchaseCommissionResult:
    unilevel: ProcessResult
    stair_step: DistributionResult
    uplines_credited: int


class PurchaseCommissionService(BaseService):
    """Runs every purchase-driven commission plan."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.purchase_repo = BinaryPurchaseRepository(session)
        self.unilevel = UnilevelDistributor(session)
        self.stair_step = StairStepCommissionDistributor(session)
        self.sales = SalesTracker(session)

    @log_operation
    @transaction
    async def distribute(
        self,
        buyer_id: int,
        amount: Decimal,
        purchase_id: int | None = None,
    ) -> PurchaseCommissionResult:
        """
        Distribute all commissions of a purchase.

        Args:
            buyer_id: Buyer (also the seller for stair-step purposes)
            amount: Purchase amount
            purchase_id: Source purchase

        Returns:
            PurchaseCommissionResult
        """
        unilevel = await self.unilevel.distribute(
            buyer_id, amount, purchase_id=purchase_id
        )
        stair_step = await self.stair_step.distribute(
            buyer_id, amount, purchase_id=purchase_id
        )
        uplines = await self.sales.record_sale(buyer_id, amount)
        return PurchaseCommissionResult(
            unilevel=unilevel,
            stair_step=stair_step,
            uplines_credited=uplines,
        )

    @transaction
    async def distribute_for_purchase(
        self, purchase_id: int
    ) -> PurchaseCommissionResult | None:
        """
        Pay the commissions of an approved purchase once.

        Returns:
            PurchaseCommissionResult, or None when already paid

        Raises:
            NotFoundError: Unknown purchase
            ConflictError: Purchase is not approved
        """
        purchase = await self.purchase_repo.get_for_update(purchase_id)
        if purchase is None:
            raise NotFoundError("Purchase not found")
        if purchase.status != PurchaseStatus.APPROVED:
            raise ConflictError(f"Purchase is {purchase.status}, not approved")
        if purchase.commissions_distributed:
            self.logger.info(
                "Purchase commissions already distributed",
                extra={"purchase_id": purchase_id},
            )
            return None

        result = await self.distribute(
            purchase.user_id, purchase.amount, purchase_id=purchase.id
        )
        purchase.commissions_distributed = True
        await self.session.flush()
        return result
