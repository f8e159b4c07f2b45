"""
Earnings consolidation.

Moves pending referral, leadership and binary commissions into the
cash wallet in one ledger entry.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import CashTransactionType, CommissionStatus, EarningsSource
from app.models.wallet import CashTransaction
from app.repositories.binary_repository import BinaryCommissionRepository
from app.repositories.commission_repository import (
    CommissionRepository,
    LeadershipCommissionRepository,
)
from app.repositories.wallet_repository import (
    CashTransactionRepository,
    WalletRepository,
)
from app.services.base_service import BaseService, transaction
from app.utils.exceptions import ValidationError


@dataclass
class ConsolidationResult:
    total: Decimal
    by_source: dict[str, Decimal] = field(default_factory=dict)
    transaction: CashTransaction | None = None


class EarningsConsolidationService(BaseService):
    """Summarizes and consolidates pending earnings."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.commission_repo = CommissionRepository(session)
        self.leadership_repo = LeadershipCommissionRepository(session)
        self.binary_repo = BinaryCommissionRepository(session)
        self.wallet_repo = WalletRepository(session)
        self.cash_repo = CashTransactionRepository(session)

    async def _pending(self, user_id: int, source: str, for_update: bool = False):
        if source == EarningsSource.COMMISSIONS:
            return await self.commission_repo.list_pending_for_user(
                user_id, for_update=for_update
            )
        if source == EarningsSource.LEADERSHIP:
            return await self.leadership_repo.list_pending_for_user(
                user_id, for_update=for_update
            )
        return await self.binary_repo.list_pending_for_user(
            user_id, for_update=for_update
        )

    async def summary(self, user_id: int) -> dict[str, Any]:
        """Pending amount and row count per source."""
        sources = {}
        total = Decimal("0")
        for source in EarningsSource:
            rows = await self._pending(user_id, source)
            amount = sum((row.amount for row in rows), Decimal("0"))
            sources[str(source)] = {"amount": str(amount), "count": len(rows)}
            total += amount
        return {"user_id": user_id, "sources": sources, "total": str(total)}

    @transaction
    async def consolidate(
        self, user_id: int, sources: list[str] | None = None
    ) -> ConsolidationResult:
        """
        Move pending earnings of the selected sources into cash.

        Args:
            user_id: Earner
            sources: Subset of commissions / leadership / binary (all when None)

        Raises:
            ValidationError: Unknown source or nothing to consolidate
        """
        try:
            selected = [EarningsSource(s) for s in (sources or list(EarningsSource))]
        except ValueError as e:
            raise ValidationError(f"Unknown earnings source: {e}") from e

        result = ConsolidationResult(total=Decimal("0"))
        for source in dict.fromkeys(selected):
            rows = await self._pending(user_id, source, for_update=True)
            amount = sum((row.amount for row in rows), Decimal("0"))
            for row in rows:
                row.status = CommissionStatus.CONSOLIDATED
            if amount > 0:
                result.by_source[str(source)] = amount
                result.total += amount

        if result.total <= 0:
            raise ValidationError("No pending earnings to consolidate")

        wallet = await self.wallet_repo.get_or_create(user_id, for_update=True)
        wallet.cash_balance += result.total
        await self.session.flush()

        result.transaction = await self.cash_repo.create(
            user_id=user_id,
            transaction_type=CashTransactionType.EARNINGS,
            amount=result.total,
            balance_after=wallet.cash_balance,
            description="Consolidated earnings: "
            + ", ".join(f"{k} {v}" for k, v in result.by_source.items()),
        )
        self.logger.info(
            "Earnings consolidated",
            extra={
                "user_id": user_id,
                "total": str(result.total),
                "sources": list(result.by_source),
            },
        )
        return result
