"""
User service.

User lookup, registration into the referral tree and admin checks.
"""

import secrets

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.repositories.wallet_repository import WalletRepository
from app.services.base_service import BaseService, transaction
from app.utils.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


class UserService(BaseService):
    """User lookup and registration."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.wallet_repo = WalletRepository(session)

    async def get_user(self, user_id: int) -> User:
        """
        Get user by ID.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def is_admin(self, user_id: int) -> bool:
        """Admins are flagged users or ids listed in ADMIN_USER_IDS."""
        if user_id in settings.get_admin_ids():
            return True
        user = await self.user_repo.get_by_id(user_id)
        return bool(user and user.is_admin)

    async def require_admin(self, user_id: int) -> None:
        """
        Raises:
            PermissionDeniedError: If the user is not an admin
        """
        if not await self.is_admin(user_id):
            self.logger.warning(
                "Admin action denied", extra={"user_id": user_id}
            )
            raise PermissionDeniedError("Admin access required")

    @transaction
    async def register_user(
        self,
        username: str,
        referred_by_id: int | None = None,
        email: str | None = None,
        full_name: str | None = None,
    ) -> User:
        """
        Register a member with an empty wallet.

        Args:
            username: Unique username
            referred_by_id: Referral sponsor (optional)
            email: Contact email
            full_name: Display name

        Returns:
            Created user

        Raises:
            ValidationError: Empty username
            ConflictError: Username taken
            NotFoundError: Unknown sponsor
        """
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username is required")
        if await self.user_repo.get_by_username(username):
            raise ConflictError("Username already registered")
        if referred_by_id is not None:
            await self.get_user(referred_by_id)

        user = await self.user_repo.create(
            username=username,
            email=email,
            full_name=full_name,
            referred_by_id=referred_by_id,
            referral_code=secrets.token_hex(4).upper(),
        )
        await self.wallet_repo.create(user_id=user.id)

        self.logger.info(
            "User registered",
            extra={"user_id": user.id, "referred_by_id": referred_by_id},
        )
        return user
