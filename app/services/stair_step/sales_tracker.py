"""
Monthly sales tracker.

A sale counts as personal volume for the seller and as team volume for
every upline within the stair-step depth.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import STAIR_STEP_MAX_DEPTH
from app.repositories.stair_step_repository import MonthlySalesRepository
from app.services.base_service import BaseService, transaction
from app.services.referral.chain_manager import ReferralChainManager
from app.utils.datetime_utils import month_start
from app.utils.exceptions import ValidationError


class SalesTracker(BaseService):
    """Maintains ``affiliate_monthly_sales``."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.sales_repo = MonthlySalesRepository(session)
        self.chain = ReferralChainManager(session)

    @transaction
    async def record_sale(
        self,
        user_id: int,
        amount: Decimal,
        is_personal: bool = True,
        month: date | None = None,
    ) -> int:
        """
        Record a sale.

        Args:
            user_id: Seller
            amount: Sale amount
            is_personal: Count as the seller's personal sales (team otherwise)
            month: Any day of the month (current month when None)

        Returns:
            Number of uplines credited with team sales
        """
        if amount <= 0:
            raise ValidationError("Sale amount must be positive")

        month = month_start(month)
        if is_personal:
            await self.sales_repo.add_sales(user_id, month, personal=amount)
        else:
            await self.sales_repo.add_sales(user_id, month, team=amount)

        upline = await self.chain.get_upline_ids(user_id, STAIR_STEP_MAX_DEPTH)
        for upline_id in upline:
            await self.sales_repo.add_sales(upline_id, month, team=amount)

        self.logger.debug(
            "Sale recorded",
            extra={
                "user_id": user_id,
                "amount": str(amount),
                "month": month.isoformat(),
                "uplines": len(upline),
            },
        )
        return len(upline)
