"""
Stair-step commission distributor.

Pays differential commissions up the referral chain and breakaway
overrides to leadership-eligible top-step uplines.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import STAIR_STEP_MAX_DEPTH
from app.models.commission import LeadershipCommission
from app.models.enums import CommissionStatus
from app.repositories.commission_repository import LeadershipCommissionRepository
from app.repositories.stair_step_repository import (
    AffiliateRankRepository,
    StairStepConfigRepository,
)
from app.services.base_service import BaseService, transaction
from app.services.referral.chain_manager import ReferralChainManager
from app.services.stair_step.leadership import LeadershipService
from app.utils.exceptions import ValidationError
from calculator import StairStepCalculator, StairStepLink


@dataclass
class DistributionResult:
    commissions: list[LeadershipCommission] = field(default_factory=list)
    total: Decimal = Decimal("0")


class StairStepCommissionDistributor(BaseService):
    """Distributes leadership (stair-step) commissions for a sale."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.config_repo = StairStepConfigRepository(session)
        self.rank_repo = AffiliateRankRepository(session)
        self.commission_repo = LeadershipCommissionRepository(session)
        self.chain = ReferralChainManager(session)
        self.leadership = LeadershipService(session)
        self.calculator = StairStepCalculator(max_depth=STAIR_STEP_MAX_DEPTH)

    @transaction
    async def distribute(
        self,
        seller_id: int,
        sales_amount: Decimal,
        order_id: int | None = None,
        purchase_id: int | None = None,
    ) -> DistributionResult:
        """
        Pay differential and breakaway commissions on one sale.

        Args:
            seller_id: Member credited with the sale
            sales_amount: Sale volume
            order_id: Source order
            purchase_id: Source purchase

        Returns:
            DistributionResult with created rows
        """
        if sales_amount <= 0:
            raise ValidationError("Sales amount must be positive")

        result = DistributionResult()
        steps = await self.config_repo.list_steps(active_only=True)
        if not steps:
            return result

        top = steps[-1]
        rates = {s.step_number: s.commission_percentage for s in steps}

        # breakaway looks up to max depth above a leader who may itself
        # sit max depth above the seller
        upline = await self.chain.get_upline_ids(
            seller_id, STAIR_STEP_MAX_DEPTH * 2
        )
        ranks = await self.rank_repo.get_steps([seller_id, *upline])

        chain = []
        for level, upline_id in enumerate(upline, start=1):
            step_number = ranks.get(upline_id, 0)
            is_top = step_number == top.step_number
            chain.append(
                StairStepLink(
                    user_id=upline_id,
                    level=level,
                    rate=rates.get(step_number, Decimal("0")),
                    is_top=is_top,
                    eligible=is_top
                    and await self.leadership.is_eligible(upline_id, top.step_number),
                )
            )

        seller_step = ranks.get(seller_id, 0)
        payouts = self.calculator.differential(
            sales_amount,
            rates.get(seller_step, Decimal("0")),
            chain[:STAIR_STEP_MAX_DEPTH],
            top.commission_percentage,
        )
        payouts += self.calculator.breakaway(
            sales_amount,
            seller_step == top.step_number,
            chain,
            top.breakaway_percentage,
        )

        for payout in payouts:
            commission = await self.commission_repo.create(
                upline_id=payout.user_id,
                downline_id=seller_id,
                amount=payout.amount,
                sales_amount=sales_amount,
                percentage=payout.percentage,
                level=payout.level,
                commission_type=payout.commission_type,
                order_id=order_id,
                purchase_id=purchase_id,
                status=CommissionStatus.PENDING,
            )
            result.commissions.append(commission)
            result.total += payout.amount

        self.logger.info(
            "Stair-step commissions distributed",
            extra={
                "seller_id": seller_id,
                "sales_amount": str(sales_amount),
                "count": len(result.commissions),
                "total": str(result.total),
            },
        )
        return result
