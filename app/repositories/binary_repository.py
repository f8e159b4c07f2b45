"""
Binary network repositories.

Data access for placement nodes, pending placements, package purchases
and binary earnings.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.binary_commission import (
    BinaryAutoReplenish,
    BinaryCommission,
    BinaryDailyEarning,
)
from app.models.binary_node import BinaryNode
from app.models.binary_pending_placement import BinaryPendingPlacement
from app.models.binary_purchase import BinaryPackagePurchase
from app.models.enums import (
    CommissionStatus,
    PendingPlacementStatus,
    PurchaseStatus,
)
from app.repositories.base import BaseRepository


class BinaryNodeRepository(BaseRepository[BinaryNode]):
    """Binary tree nodes."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(BinaryNode, session)

    async def get_main_account(self, user_id: int) -> BinaryNode | None:
        """Account #1 of ``user_id``."""
        return await self.get_by(user_id=user_id, account_number=1)

    async def list_accounts(self, user_id: int) -> list[BinaryNode]:
        """All accounts of a user ordered by account number."""
        return await self.find_all(
            user_id=user_id, order_by=BinaryNode.account_number
        )

    async def get_many(self, ids: list[int]) -> dict[int, BinaryNode]:
        """
        Load several nodes in one query.

        Args:
            ids: Node IDs

        Returns:
            Mapping id -> node for ids that exist
        """
        if not ids:
            return {}
        stmt = select(BinaryNode).where(BinaryNode.id.in_(ids))
        result = await self.session.execute(stmt)
        return {node.id: node for node in result.scalars().all()}

    async def get_children(self, parent_ids: list[int]) -> list[BinaryNode]:
        """Direct children of the given parents."""
        if not parent_ids:
            return []
        stmt = (
            select(BinaryNode)
            .where(BinaryNode.parent_id.in_(parent_ids))
            .order_by(BinaryNode.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_parent_link(self, node_id: int) -> tuple[int | None, str | None]:
        """``(parent_id, placement_leg)`` of a node."""
        stmt = select(BinaryNode.parent_id, BinaryNode.placement_leg).where(
            BinaryNode.id == node_id
        )
        result = await self.session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None, None
        return row[0], row[1]

    async def list_sponsored(self, sponsor_node_id: int) -> list[BinaryNode]:
        """Nodes directly sponsored by ``sponsor_node_id``."""
        return await self.find_all(sponsor_id=sponsor_node_id)


class BinaryPendingPlacementRepository(BaseRepository[BinaryPendingPlacement]):
    """Pending placements waiting for a sponsor decision."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(BinaryPendingPlacement, session)

    async def list_pending(
        self, sponsor_user_id: int
    ) -> list[BinaryPendingPlacement]:
        """Pending placements of a sponsor, oldest first."""
        return await self.find_all(
            sponsor_user_id=sponsor_user_id,
            status=PendingPlacementStatus.PENDING,
            order_by=BinaryPendingPlacement.created_at,
        )

    async def get_pending_for_user(
        self, pending_user_id: int
    ) -> BinaryPendingPlacement | None:
        """Open placement request of a new member, if any."""
        return await self.get_by(
            pending_user_id=pending_user_id,
            status=PendingPlacementStatus.PENDING,
        )


class BinaryPurchaseRepository(BaseRepository[BinaryPackagePurchase]):
    """Binary package purchases."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(BinaryPackagePurchase, session)

    async def has_approved_purchase(self, user_id: int) -> bool:
        return await self.exists(
            user_id=user_id, status=PurchaseStatus.APPROVED
        )

    async def list_by_status(
        self, status: str, limit: int | None = None
    ) -> list[BinaryPackagePurchase]:
        return await self.find_all(
            status=status,
            limit=limit,
            order_by=BinaryPackagePurchase.created_at,
        )


class BinaryCommissionRepository(BaseRepository[BinaryCommission]):
    """Binary cycle commissions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(BinaryCommission, session)

    async def total_for_user(self, user_id: int) -> Decimal:
        """Lifetime binary earnings of a user."""
        stmt = select(func.coalesce(func.sum(BinaryCommission.amount), 0)).where(
            BinaryCommission.user_id == user_id
        )
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))

    async def list_pending_for_user(
        self, user_id: int, for_update: bool = False
    ) -> list[BinaryCommission]:
        """Commissions not yet moved to the cash wallet."""
        stmt = (
            select(BinaryCommission)
            .where(
                BinaryCommission.user_id == user_id,
                BinaryCommission.status == CommissionStatus.PENDING,
                BinaryCommission.amount > 0,
            )
            .order_by(BinaryCommission.id)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class BinaryDailyEarningRepository(BaseRepository[BinaryDailyEarning]):
    """Per-account daily earnings (daily cap bookkeeping)."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(BinaryDailyEarning, session)

    async def get_for_day(
        self, node_id: int, earning_date: date
    ) -> BinaryDailyEarning | None:
        return await self.get_by(node_id=node_id, earning_date=earning_date)

    async def earned_on(self, node_id: int, earning_date: date) -> Decimal:
        """Amount already earned by an account on ``earning_date``."""
        row = await self.get_for_day(node_id, earning_date)
        return row.total_earned if row else Decimal("0")

    async def add_earning(
        self,
        node_id: int,
        user_id: int,
        earning_date: date,
        amount: Decimal,
        cycles: int,
        flushed: Decimal,
    ) -> BinaryDailyEarning:
        """
        Upsert the day row of an account.

        Args:
            node_id: Account that earned
            user_id: Account owner
            earning_date: Day (UTC)
            amount: Paid amount to add
            cycles: Matched cycles to add
            flushed: Capped-away amount to add

        Returns:
            Updated day row
        """
        row = await self.get_for_day(node_id, earning_date)
        if row is None:
            return await self.create(
                node_id=node_id,
                user_id=user_id,
                earning_date=earning_date,
                total_earned=amount,
                cycles=cycles,
                flushed_amount=flushed,
            )
        row.total_earned += amount
        row.cycles += cycles
        row.flushed_amount += flushed
        await self.session.flush()
        return row

    async def daily_totals(
        self, user_id: int, since: date
    ) -> list[tuple[date, Decimal, int]]:
        """
        Earnings of all accounts of a user grouped by day.

        Returns:
            ``(day, amount, cycles)`` rows, newest first
        """
        stmt = (
            select(
                BinaryDailyEarning.earning_date,
                func.sum(BinaryDailyEarning.total_earned),
                func.sum(BinaryDailyEarning.cycles),
            )
            .where(
                BinaryDailyEarning.user_id == user_id,
                BinaryDailyEarning.earning_date >= since,
            )
            .group_by(BinaryDailyEarning.earning_date)
            .order_by(BinaryDailyEarning.earning_date.desc())
        )
        result = await self.session.execute(stmt)
        return [
            (day, Decimal(str(amount or 0)), int(cycles or 0))
            for day, amount, cycles in result.all()
        ]


class BinaryAutoReplenishRepository(BaseRepository[BinaryAutoReplenish]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(BinaryAutoReplenish, session)
