"""
Wallet repositories.

Data access for wallets, the cash ledger, payout requests and AI
credit usage.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.ai_usage import AICreditUsage
from app.models.wallet import CashTransaction, PayoutRequest, Wallet
from app.repositories.base import BaseRepository


class WalletRepository(BaseRepository[Wallet]):
    """Wallet repository."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Wallet, session)

    async def get_for_user(
        self, user_id: int, for_update: bool = False
    ) -> Wallet | None:
        """
        Get wallet of a user.

        Args:
            user_id: Owner
            for_update: Lock the wallet row until the transaction ends

        Returns:
            Wallet or None
        """
        stmt = select(Wallet).where(Wallet.user_id == user_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(
                populate_existing=True
            )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(
        self, user_id: int, for_update: bool = False
    ) -> Wallet:
        """Wallet of a user, created empty on first access."""
        wallet = await self.get_for_user(user_id, for_update=for_update)
        if wallet is None:
            wallet = await self.create(user_id=user_id)
            if for_update:
                wallet = await self.get_for_user(user_id, for_update=True)
        return wallet


class CashTransactionRepository(BaseRepository[CashTransaction]):
    """Cash wallet ledger."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(CashTransaction, session)

    async def list_for_user(
        self, user_id: int, limit: int = 50
    ) -> list[CashTransaction]:
        return await self.find_all(
            user_id=user_id, limit=limit, order_by=CashTransaction.id.desc()
        )


class PayoutRequestRepository(BaseRepository[PayoutRequest]):
    """Cash payout requests."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(PayoutRequest, session)

    async def list_by_status(
        self, status: str, limit: int = 50
    ) -> list[PayoutRequest]:
        return await self.find_all(
            status=status, limit=limit, order_by=PayoutRequest.created_at
        )


class AICreditUsageRepository(BaseRepository[AICreditUsage]):
    """AI credit usage log."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AICreditUsage, session)
