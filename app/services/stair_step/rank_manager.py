"""
Stair-step rank manager.

Monthly qualification: a member qualifies for the highest active step
whose quota is met by the metric of that step. Qualifying for the same
step in consecutive months fixes the rank after ``months_to_qualify``
months; unfixed ranks fall back to step 0 when a month passes without
qualification.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import QualificationType
from app.models.stair_step import AffiliateMonthlySales, StairStepConfig
from app.repositories.stair_step_repository import (
    AffiliateRankRepository,
    MonthlySalesRepository,
    RankHistoryRepository,
    StairStepConfigRepository,
)
from app.services.base_service import BaseService, transaction
from app.utils.datetime_utils import is_consecutive_month, month_start, utc_now


@dataclass
class RankEvaluation:
    """Outcome of one member's monthly evaluation."""

    user_id: int
    month: date
    qualified_step: int | None
    current_step: int
    qualification_count: int
    is_fixed: bool

    @property
    def qualified(self) -> bool:
        return self.qualified_step is not None


def qualifying_volume(step: StairStepConfig, sales: AffiliateMonthlySales) -> Decimal:
    """Sales figure that counts toward ``step``'s quota."""
    if step.qualification_type == QualificationType.GROUP:
        return sales.team_sales
    if step.qualification_type == QualificationType.COMBINED:
        return sales.total_sales
    return sales.personal_sales


def find_qualified_step(
    steps: list[StairStepConfig], sales: AffiliateMonthlySales | None
) -> StairStepConfig | None:
    """Highest active step whose quota is met (None without sales)."""
    if sales is None:
        return None
    qualified = None
    for step in sorted(steps, key=lambda s: s.step_number):
        if step.active and qualifying_volume(step, sales) >= step.sales_quota:
            qualified = step
    return qualified


class RankManager(BaseService):
    """Evaluates and reverts stair-step ranks."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.config_repo = StairStepConfigRepository(session)
        self.rank_repo = AffiliateRankRepository(session)
        self.sales_repo = MonthlySalesRepository(session)
        self.history_repo = RankHistoryRepository(session)

    @transaction
    async def evaluate(
        self,
        user_id: int,
        month: date | None = None,
        steps: list[StairStepConfig] | None = None,
    ) -> RankEvaluation:
        """
        Check and update one member's rank for ``month``.

        Args:
            user_id: Member
            month: Any day of the evaluated month (current month when None)
            steps: Active steps, loaded when None

        Returns:
            RankEvaluation with the resulting rank
        """
        month = month_start(month)
        if steps is None:
            steps = await self.config_repo.list_steps(active_only=True)

        sales = await self.sales_repo.get_for_month(user_id, month)
        step = find_qualified_step(steps, sales)

        rank = await self.rank_repo.get_or_create(user_id)
        rank = await self.rank_repo.get_for_update(rank.id)

        if step is None:
            return RankEvaluation(
                user_id=user_id,
                month=month,
                qualified_step=None,
                current_step=rank.current_step,
                qualification_count=rank.qualification_count,
                is_fixed=rank.is_fixed,
            )

        repeat_in_month = (
            rank.last_qualified_at == month
            and rank.last_qualified_step == step.step_number
        )
        if repeat_in_month:
            count = rank.qualification_count
        elif rank.last_qualified_step == step.step_number and is_consecutive_month(
            rank.last_qualified_at, month
        ):
            count = rank.qualification_count + 1
        else:
            count = 1

        reached_fixed = count >= step.months_to_qualify

        # a fixed higher rank is never lowered
        if not (rank.is_fixed and rank.current_step > step.step_number):
            keep_fixed = rank.is_fixed and rank.current_step == step.step_number
            rank.current_step = step.step_number
            rank.is_fixed = reached_fixed or keep_fixed

        rank.qualification_count = count
        rank.last_qualified_step = step.step_number
        rank.last_qualified_at = month

        if not repeat_in_month:
            await self.history_repo.create(
                user_id=user_id,
                step_number=step.step_number,
                qualified_month=month,
                sales_volume=qualifying_volume(step, sales),
                qualification_count=count,
                is_fixed=reached_fixed,
            )
        await self.session.flush()

        self.logger.info(
            "Rank evaluated",
            extra={
                "user_id": user_id,
                "month": month.isoformat(),
                "step": step.step_number,
                "count": count,
                "fixed": rank.is_fixed,
            },
        )
        return RankEvaluation(
            user_id=user_id,
            month=month,
            qualified_step=step.step_number,
            current_step=rank.current_step,
            qualification_count=count,
            is_fixed=rank.is_fixed,
        )

    @transaction
    async def evaluate_all(self, month: date | None = None) -> int:
        """
        Evaluate every member with sales in ``month``.

        Returns:
            Number of members that qualified for a step
        """
        month = month_start(month)
        steps = await self.config_repo.list_steps(active_only=True)
        user_ids = await self.sales_repo.list_user_ids_for_month(month)

        qualified = 0
        for user_id in user_ids:
            result = await self.evaluate(user_id, month, steps=steps)
            if result.qualified:
                qualified += 1

        self.logger.info(
            "Monthly rank evaluation finished",
            extra={
                "month": month.isoformat(),
                "evaluated": len(user_ids),
                "qualified": qualified,
            },
        )
        return qualified

    @transaction
    async def process_monthly_reversion(self, month: date | None = None) -> int:
        """
        Revert unfixed ranks that did not qualify in ``month`` to step 0.

        Returns:
            Number of reverted ranks
        """
        month = month_start(month)
        ranks = await self.rank_repo.list_revertible(month)
        now = utc_now()

        for rank in ranks:
            rank.current_step = 0
            rank.qualification_count = 0
            latest = await self.history_repo.get_latest(rank.user_id)
            if latest is not None and latest.reverted_at is None:
                latest.reverted_at = now

        await self.session.flush()
        self.logger.info(
            "Monthly rank reversion finished",
            extra={"month": month.isoformat(), "reverted": len(ranks)},
        )
        return len(ranks)
