"""
Commission repositories.

Data access for referral commissions and leadership commissions.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.commission import Commission, LeadershipCommission
from app.models.enums import CommissionStatus, LeadershipCommissionType
from app.repositories.base import BaseRepository


class CommissionRepository(BaseRepository[Commission]):
    """Unilevel and order commissions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Commission, session)

    async def exists_for_order(self, order_id: int) -> bool:
        return await self.exists(order_id=order_id)

    async def list_pending_for_user(
        self, user_id: int, for_update: bool = False
    ) -> list[Commission]:
        """Commissions not yet moved to the cash wallet."""
        stmt = (
            select(Commission)
            .where(
                Commission.user_id == user_id,
                Commission.status == CommissionStatus.PENDING,
            )
            .order_by(Commission.id)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_user(
        self, user_id: int, limit: int = 50
    ) -> list[Commission]:
        return await self.find_all(
            user_id=user_id, limit=limit, order_by=Commission.id.desc()
        )


class LeadershipCommissionRepository(BaseRepository[LeadershipCommission]):
    """Stair-step differential and breakaway commissions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(LeadershipCommission, session)

    async def total_breakaway(self, user_id: int) -> Decimal:
        """Lifetime breakaway earnings of a user."""
        stmt = select(
            func.coalesce(func.sum(LeadershipCommission.amount), 0)
        ).where(
            LeadershipCommission.upline_id == user_id,
            LeadershipCommission.commission_type
            == LeadershipCommissionType.BREAKAWAY,
        )
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))

    async def list_recent(
        self, user_id: int, limit: int = 10
    ) -> list[LeadershipCommission]:
        return await self.find_all(
            upline_id=user_id,
            limit=limit,
            order_by=LeadershipCommission.id.desc(),
        )

    async def list_pending_for_user(
        self, user_id: int, for_update: bool = False
    ) -> list[LeadershipCommission]:
        stmt = (
            select(LeadershipCommission)
            .where(
                LeadershipCommission.upline_id == user_id,
                LeadershipCommission.status == CommissionStatus.PENDING,
            )
            .order_by(LeadershipCommission.id)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
