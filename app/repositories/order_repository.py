"""
Order repository.

Data access layer for orders read by the commission processor.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.order import Order
from app.repositories.base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    """Order repository."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Order, session)
