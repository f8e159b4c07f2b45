"""
Upline transfer repository.

Data access layer for sponsor change requests.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import TransferStatus
from app.models.upline_transfer_request import UplineTransferRequest
from app.repositories.base import BaseRepository


class UplineTransferRepository(BaseRepository[UplineTransferRequest]):
    """Upline transfer requests."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(UplineTransferRequest, session)

    async def get_pending_for_user(
        self, user_id: int
    ) -> UplineTransferRequest | None:
        return await self.get_by(user_id=user_id, status=TransferStatus.PENDING)

    async def list_by_status(
        self, status: str | None = None, limit: int = 50
    ) -> list[UplineTransferRequest]:
        """Requests, newest first, optionally filtered by status."""
        filters = {"status": status} if status else {}
        return await self.find_all(
            limit=limit,
            order_by=UplineTransferRequest.created_at.desc(),
            **filters,
        )

    async def list_for_user(self, user_id: int) -> list[UplineTransferRequest]:
        return await self.find_all(
            user_id=user_id, order_by=UplineTransferRequest.created_at.desc()
        )
