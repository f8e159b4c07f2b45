"""
Referral chain management module.

Walks the sponsor tree (``users.referred_by_id``) up and down.
"""

from loguru import logger
from sqlalchemy import literal, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.config.operational_constants import CHAIN_MAX_DEPTH
from app.models.user import User
from app.repositories.user_repository import UserRepository


class ReferralChainManager:
    """Manages referral chain operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chain manager."""
        self.session = session
        self.user_repo = UserRepository(session)

    async def get_upline_ids(self, user_id: int, depth: int) -> list[int]:
        """
        Get the sponsor chain above a user (recursive CTE).

        Args:
            user_id: Starting user
            depth: Number of levels to return

        Returns:
            Upline ids ordered from the direct sponsor (level 1) upwards.
            The walk stops early if the chain loops back on itself.
        """
        if depth <= 0:
            return []

        chain = (
            select(
                User.id.label("id"),
                User.referred_by_id.label("sponsor_id"),
                literal(0).label("level"),
            )
            .where(User.id == user_id)
            .cte("upline_chain", recursive=True)
        )
        sponsor = aliased(User)
        chain = chain.union_all(
            select(
                sponsor.id,
                sponsor.referred_by_id,
                (chain.c.level + 1).label("level"),
            )
            .join(chain, sponsor.id == chain.c.sponsor_id)
            .where(chain.c.level < depth)
        )
        stmt = (
            select(chain.c.id)
            .where(chain.c.level > 0)
            .order_by(chain.c.level)
        )
        result = await self.session.execute(stmt)
        rows = list(result.scalars().all())

        upline: list[int] = []
        seen = {user_id}
        for upline_id in rows:
            if upline_id in seen:
                logger.warning(
                    "Referral loop detected in sponsor chain",
                    extra={"user_id": user_id, "chain": rows},
                )
                break
            seen.add(upline_id)
            upline.append(upline_id)

        return upline

    async def is_in_downline(self, ancestor_id: int, user_id: int) -> bool:
        """
        Check whether ``user_id`` sits below ``ancestor_id``.

        Args:
            ancestor_id: Possible upline
            user_id: Possible downline

        Returns:
            True if ``ancestor_id`` appears in the sponsor chain of ``user_id``
        """
        upline = await self.get_upline_ids(user_id, CHAIN_MAX_DEPTH)
        return ancestor_id in upline

    async def get_downline_levels(
        self, user_id: int, depth: int
    ) -> list[list[int]]:
        """
        Downline ids grouped by level.

        Returns:
            ``levels[0]`` holds direct referrals, ``levels[1]`` their
            referrals and so on, up to ``depth`` levels
        """
        levels: list[list[int]] = []
        seen = {user_id}
        current = [user_id]
        for _ in range(depth):
            children_map = await self.user_repo.get_direct_referral_ids(current)
            next_level = [
                child
                for parent in current
                for child in children_map.get(parent, [])
                if child not in seen
            ]
            if not next_level:
                break
            seen.update(next_level)
            levels.append(next_level)
            current = next_level
        return levels
