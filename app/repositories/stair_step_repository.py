"""
Stair-step repositories.

Data access for step configuration, current ranks, monthly sales and
rank history.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.stair_step import (
    AffiliateCurrentRank,
    AffiliateMonthlySales,
    AffiliateRankHistory,
    StairStepConfig,
)
from app.repositories.base import BaseRepository


class StairStepConfigRepository(BaseRepository[StairStepConfig]):
    """Step configuration."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(StairStepConfig, session)

    async def list_steps(self, active_only: bool = False) -> list[StairStepConfig]:
        """Steps ordered by step number."""
        filters = {"active": True} if active_only else {}
        return await self.find_all(
            order_by=StairStepConfig.step_number, **filters
        )

    async def get_by_step_number(self, step_number: int) -> StairStepConfig | None:
        return await self.get_by(step_number=step_number)

    async def max_step_number(self) -> int:
        stmt = select(func.max(StairStepConfig.step_number))
        result = await self.session.execute(stmt)
        return result.scalar() or 0


class AffiliateRankRepository(BaseRepository[AffiliateCurrentRank]):
    """Current ranks."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AffiliateCurrentRank, session)

    async def get_for_user(self, user_id: int) -> AffiliateCurrentRank | None:
        return await self.get_by(user_id=user_id)

    async def get_or_create(self, user_id: int) -> AffiliateCurrentRank:
        """Rank row of a user, created unranked on first access."""
        rank = await self.get_for_user(user_id)
        if rank is None:
            rank = await self.create(
                user_id=user_id,
                current_step=0,
                qualification_count=0,
                is_fixed=False,
                last_qualified_step=0,
            )
        return rank

    async def get_steps(self, user_ids: list[int]) -> dict[int, int]:
        """
        Current step of several users in one query.

        Returns:
            Mapping user id -> current step (users without a row are absent)
        """
        if not user_ids:
            return {}
        stmt = select(
            AffiliateCurrentRank.user_id, AffiliateCurrentRank.current_step
        ).where(AffiliateCurrentRank.user_id.in_(user_ids))
        result = await self.session.execute(stmt)
        return {user_id: step for user_id, step in result.all()}

    async def list_revertible(self, month: date) -> list[AffiliateCurrentRank]:
        """Ranked, non-fixed rows that did not qualify in ``month``."""
        stmt = select(AffiliateCurrentRank).where(
            AffiliateCurrentRank.is_fixed.is_(False),
            AffiliateCurrentRank.current_step > 0,
            (AffiliateCurrentRank.last_qualified_at.is_(None))
            | (AffiliateCurrentRank.last_qualified_at != month),
        ).with_for_update()
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class MonthlySalesRepository(BaseRepository[AffiliateMonthlySales]):
    """Monthly sales totals."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AffiliateMonthlySales, session)

    async def get_for_month(
        self, user_id: int, month: date
    ) -> AffiliateMonthlySales | None:
        return await self.get_by(user_id=user_id, sales_month=month)

    async def add_sales(
        self,
        user_id: int,
        month: date,
        personal: Decimal = Decimal("0"),
        team: Decimal = Decimal("0"),
    ) -> AffiliateMonthlySales:
        """
        Add to a user's monthly totals, creating the row if needed.

        Args:
            user_id: Affiliate
            month: First day of the month
            personal: Personal sales to add
            team: Team sales to add

        Returns:
            Updated row
        """
        row = await self.get_for_month(user_id, month)
        if row is None:
            return await self.create(
                user_id=user_id,
                sales_month=month,
                personal_sales=personal,
                team_sales=team,
                total_sales=personal + team,
            )
        row.personal_sales += personal
        row.team_sales += team
        row.total_sales += personal + team
        await self.session.flush()
        return row

    async def list_user_ids_for_month(self, month: date) -> list[int]:
        """Users with any sales recorded in ``month``."""
        stmt = (
            select(AffiliateMonthlySales.user_id)
            .where(AffiliateMonthlySales.sales_month == month)
            .order_by(AffiliateMonthlySales.user_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class RankHistoryRepository(BaseRepository[AffiliateRankHistory]):
    """Qualification history."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AffiliateRankHistory, session)

    async def get_latest(self, user_id: int) -> AffiliateRankHistory | None:
        stmt = (
            select(AffiliateRankHistory)
            .where(AffiliateRankHistory.user_id == user_id)
            .order_by(
                AffiliateRankHistory.qualified_month.desc(),
                AffiliateRankHistory.id.desc(),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(
        self, user_id: int, limit: int = 12
    ) -> list[AffiliateRankHistory]:
        return await self.find_all(
            user_id=user_id,
            limit=limit,
            order_by=AffiliateRankHistory.id.desc(),
        )
