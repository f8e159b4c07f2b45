"""
User repository.

Data access layer for User model and the referral (sponsor) tree.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_username(self, username: str) -> User | None:
        """
        Get user by username.

        Args:
            username: Unique username

        Returns:
            User or None
        """
        return await self.get_by(username=username)

    async def get_direct_referrals(self, user_id: int) -> list[User]:
        """Users whose sponsor is ``user_id``, oldest first."""
        return await self.find_all(referred_by_id=user_id)

    async def get_direct_referral_ids(
        self, user_ids: list[int]
    ) -> dict[int, list[int]]:
        """
        Direct referral ids for several sponsors in one query.

        Args:
            user_ids: Sponsor user IDs

        Returns:
            Mapping sponsor id -> list of referral ids (every sponsor present)
        """
        children: dict[int, list[int]] = {uid: [] for uid in user_ids}
        if not user_ids:
            return children

        stmt = (
            select(User.id, User.referred_by_id)
            .where(User.referred_by_id.in_(user_ids))
            .order_by(User.id)
        )
        result = await self.session.execute(stmt)
        for child_id, sponsor_id in result.all():
            children[sponsor_id].append(child_id)
        return children

    async def get_sponsor_id(self, user_id: int) -> int | None:
        """Referral sponsor of ``user_id`` (None for top-level users)."""
        stmt = select(User.referred_by_id).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all_ids(self) -> list[int]:
        """IDs of all active users."""
        stmt = select(User.id).where(User.is_active.is_(True)).order_by(User.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_usernames(self, user_ids: list[int]) -> dict[int, str]:
        """Mapping user id -> username."""
        if not user_ids:
            return {}
        stmt = select(User.id, User.username).where(User.id.in_(user_ids))
        result = await self.session.execute(stmt)
        return {user_id: username for user_id, username in result.all()}
