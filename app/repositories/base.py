"""
Base repository.

Generic lookups shared by all repositories. Writes flush but never
commit; services own the transaction.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Repository over one model.

    Example:
        class OrderRepository(BaseRepository[Order]):
            def __init__(self, session: AsyncSession):
                super().__init__(Order, session)
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        self.model = model
        self.session = session

    async def get_by_id(self, id: int) -> ModelType | None:
        return await self.session.get(self.model, id)

    async def get_for_update(self, id: int) -> ModelType | None:
        """
        Load a row and lock it until the transaction ends.

        Already loaded instances are refreshed so balances and legs are
        never read stale under the lock.
        """
        stmt = (
            select(self.model)
            .where(self.model.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by(self, **filters: Any) -> ModelType | None:
        """First row matching column filters, or None."""
        stmt = select(self.model).filter_by(**filters).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_all(
        self,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any = None,
        **filters: Any,
    ) -> list[ModelType]:
        """
        Rows matching column filters.

        Args:
            limit: Max number of rows
            offset: Rows to skip
            order_by: Sort expression (id when omitted)
            **filters: Column filters
        """
        stmt = select(self.model).filter_by(**filters)
        stmt = stmt.order_by(order_by if order_by is not None else self.model.id)
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def exists(self, **filters: Any) -> bool:
        stmt = select(exists().where(
            *(getattr(self.model, column) == value for column, value in filters.items())
        ))
        return bool(await self.session.scalar(stmt))

    async def create(self, **data: Any) -> ModelType:
        """Add a row, flush it and load server defaults."""
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity
