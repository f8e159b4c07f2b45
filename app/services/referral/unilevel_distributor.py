"""
Unilevel commission distributor.

Pays a configured percent of a purchase to each of the buyer's first
seven uplines.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import UNILEVEL_DEPTH
from app.models.commission import Commission
from app.models.enums import CommissionStatus, CommissionType
from app.repositories.commission_repository import CommissionRepository
from app.services.app_settings_service import AppSettingsService
from app.services.base_service import BaseService, transaction
from app.services.referral.chain_manager import ReferralChainManager
from app.utils.exceptions import ValidationError


@dataclass
class ProcessResult:
    """Result of a commission distribution run."""

    success: bool
    total_distributed: Decimal = Decimal("0")
    commissions_count: int = 0
    skipped: bool = False
    commissions: list[Commission] = field(default_factory=list)


class UnilevelDistributor(BaseService):
    """Unilevel (7-level) commissions on purchases."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.chain = ReferralChainManager(session)
        self.commission_repo = CommissionRepository(session)
        self.settings_service = AppSettingsService(session)

    @transaction
    async def distribute(
        self,
        buyer_id: int,
        amount: Decimal,
        purchase_id: int | None = None,
    ) -> ProcessResult:
        """
        Pay unilevel commissions for a purchase.

        Args:
            buyer_id: User who purchased
            amount: Purchase amount
            purchase_id: Source purchase

        Returns:
            ProcessResult with created commissions
        """
        if amount <= 0:
            raise ValidationError("Amount must be positive")

        rates = await self.settings_service.get_unilevel_rates()
        upline = await self.chain.get_upline_ids(buyer_id, UNILEVEL_DEPTH)
        result = ProcessResult(success=True)

        for level, upline_id in enumerate(upline, start=1):
            rate = rates.get(level, Decimal("0"))
            commission_amount = (amount * rate / 100).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )
            if commission_amount <= 0:
                continue

            commission = await self.commission_repo.create(
                user_id=upline_id,
                from_user_id=buyer_id,
                purchase_id=purchase_id,
                amount=commission_amount,
                percentage=rate,
                level=level,
                commission_type=CommissionType.UNILEVEL,
                status=CommissionStatus.PENDING,
            )
            result.commissions.append(commission)
            result.total_distributed += commission_amount

        result.commissions_count = len(result.commissions)
        self.logger.info(
            "Unilevel commissions distributed",
            extra={
                "buyer_id": buyer_id,
                "purchase_id": purchase_id,
                "amount": str(amount),
                "count": result.commissions_count,
                "total": str(result.total_distributed),
            },
        )
        return result
