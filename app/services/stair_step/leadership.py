"""
Leadership status and stair-step tree.

A top-step member is leadership-eligible (earns breakaway) when at
least two distinct direct referral lines contain a top-step member
within the stair-step depth.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import LEADERSHIP_MIN_LINES, STAIR_STEP_MAX_DEPTH
from app.models.stair_step import StairStepConfig
from app.repositories.commission_repository import LeadershipCommissionRepository
from app.repositories.stair_step_repository import (
    AffiliateRankRepository,
    StairStepConfigRepository,
)
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService
from app.services.referral.chain_manager import ReferralChainManager


class LeadershipService(BaseService):
    """Leadership eligibility, status and tree views."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.config_repo = StairStepConfigRepository(session)
        self.rank_repo = AffiliateRankRepository(session)
        self.commission_repo = LeadershipCommissionRepository(session)
        self.user_repo = UserRepository(session)
        self.chain = ReferralChainManager(session)

    async def _top_step(self) -> StairStepConfig | None:
        steps = await self.config_repo.list_steps(active_only=True)
        return steps[-1] if steps else None

    async def count_qualified_lines(self, user_id: int, top_step: int) -> int:
        """
        Direct referral lines containing a top-step member.

        Each line is a direct referral plus its downline, together
        spanning ``STAIR_STEP_MAX_DEPTH`` levels below ``user_id``.
        """
        direct = (await self.user_repo.get_direct_referral_ids([user_id]))[user_id]
        qualified = 0
        for line_root in direct:
            levels = await self.chain.get_downline_levels(
                line_root, STAIR_STEP_MAX_DEPTH - 1
            )
            members = [line_root] + [uid for level in levels for uid in level]
            steps = await self.rank_repo.get_steps(members)
            if any(step == top_step for step in steps.values()):
                qualified += 1
        return qualified

    async def is_eligible(self, user_id: int, top_step: int | None = None) -> bool:
        """Whether the user holds the top step and has enough qualified lines."""
        if top_step is None:
            top = await self._top_step()
            if top is None:
                return False
            top_step = top.step_number

        steps = await self.rank_repo.get_steps([user_id])
        if steps.get(user_id, 0) != top_step:
            return False
        lines = await self.count_qualified_lines(user_id, top_step)
        return lines >= LEADERSHIP_MIN_LINES

    async def get_status(self, user_id: int) -> dict[str, Any]:
        """Rank, leadership eligibility and breakaway earnings of a member."""
        top = await self._top_step()
        rank = await self.rank_repo.get_for_user(user_id)
        current_step = rank.current_step if rank else 0
        step = (
            await self.config_repo.get_by_step_number(current_step)
            if current_step
            else None
        )

        is_top = top is not None and current_step == top.step_number
        lines = (
            await self.count_qualified_lines(user_id, top.step_number)
            if is_top
            else 0
        )
        recent = await self.commission_repo.list_recent(user_id)

        return {
            "user_id": user_id,
            "current_step": current_step,
            "step_name": step.step_name if step else None,
            "is_fixed": bool(rank and rank.is_fixed),
            "max_step": top.step_number if top else 0,
            "is_top_step": is_top,
            "qualified_lines": lines,
            "required_lines": LEADERSHIP_MIN_LINES,
            "is_eligible": is_top and lines >= LEADERSHIP_MIN_LINES,
            "breakaway_percentage": str(top.breakaway_percentage) if top else "0",
            "total_breakaway": str(await self.commission_repo.total_breakaway(user_id)),
            "recent_commissions": [
                {
                    "id": c.id,
                    "downline_id": c.downline_id,
                    "amount": str(c.amount),
                    "level": c.level,
                    "type": c.commission_type,
                    "created_at": c.created_at.isoformat(),
                }
                for c in recent
            ],
        }

    async def get_tree(
        self, user_id: int, depth: int = STAIR_STEP_MAX_DEPTH
    ) -> dict[str, Any]:
        """Nested referral tree with each member's step name and rate."""
        depth = max(0, min(depth, STAIR_STEP_MAX_DEPTH))
        steps = {s.step_number: s for s in await self.config_repo.list_steps()}

        levels = await self.chain.get_downline_levels(user_id, depth)
        all_ids = [user_id] + [uid for level in levels for uid in level]
        ranks = await self.rank_repo.get_steps(all_ids)
        names = await self.user_repo.get_usernames(all_ids)

        def view(uid: int) -> dict[str, Any]:
            step_number = ranks.get(uid, 0)
            step = steps.get(step_number)
            return {
                "user_id": uid,
                "username": names.get(uid),
                "step": step_number,
                "step_name": step.step_name if step else None,
                "rate": str(step.commission_percentage) if step else "0",
                "children": [],
            }

        views = {user_id: view(user_id)}
        parents = [user_id]
        for _ in levels:
            children_map = await self.user_repo.get_direct_referral_ids(parents)
            next_parents = []
            for parent_id in parents:
                for child_id in children_map.get(parent_id, []):
                    if child_id in views:
                        continue
                    views[child_id] = view(child_id)
                    views[parent_id]["children"].append(views[child_id])
                    next_parents.append(child_id)
            parents = next_parents

        return views[user_id]
