"""
Binary genealogy and earnings analytics.
"""

from datetime import timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.operational_constants import CHAIN_MAX_DEPTH, GENEALOGY_MAX_DEPTH
from app.models.binary_node import BinaryNode
from app.models.enums import BinaryLeg
from app.repositories.binary_repository import (
    BinaryCommissionRepository,
    BinaryDailyEarningRepository,
    BinaryNodeRepository,
)
from app.services.base_service import BaseService
from app.services.user_service import UserService
from app.utils.datetime_utils import utc_today
from app.utils.exceptions import NotFoundError


def _node_summary(node: BinaryNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "user_id": node.user_id,
        "account_number": node.account_number,
        "leg": node.placement_leg,
        "left_volume": str(node.left_volume),
        "right_volume": str(node.right_volume),
        "total_cycles": node.total_cycles,
    }


class BinaryGenealogyService(BaseService):
    """Tree views and earnings summaries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.node_repo = BinaryNodeRepository(session)
        self.commission_repo = BinaryCommissionRepository(session)
        self.daily_repo = BinaryDailyEarningRepository(session)
        self.user_service = UserService(session)

    async def can_view(self, node_id: int, requester_user_id: int) -> bool:
        """
        Admins see every node; users see their accounts and what lies below.

        Args:
            node_id: Node to view
            requester_user_id: Caller

        Returns:
            True if the node is visible to the caller
        """
        if await self.user_service.is_admin(requester_user_id):
            return True

        current = await self.node_repo.get_by_id(node_id)
        hops = 0
        while current is not None and hops <= CHAIN_MAX_DEPTH:
            if current.user_id == requester_user_id:
                return True
            if current.parent_id is None:
                return False
            current = await self.node_repo.get_by_id(current.parent_id)
            hops += 1
        return False

    async def get_tree(
        self,
        node_id: int,
        requester_user_id: int,
        depth: int = 3,
    ) -> dict[str, Any]:
        """
        Nested view of the tree below ``node_id``.

        Args:
            node_id: Top of the view
            requester_user_id: Caller (visibility check)
            depth: Levels below the top (capped at GENEALOGY_MAX_DEPTH)

        Returns:
            Node dict with ``children: {"left": ..., "right": ...}``

        Raises:
            NotFoundError: Unknown or not visible node
        """
        depth = max(0, min(depth, GENEALOGY_MAX_DEPTH))

        root = await self.node_repo.get_by_id(node_id)
        if root is None or not await self.can_view(node_id, requester_user_id):
            raise NotFoundError("Binary node not found")

        root_view = _node_summary(root)
        views = {root.id: root_view}
        level = [root]

        for _ in range(depth):
            children = await self.node_repo.get_children([n.id for n in level])
            if not children:
                break
            for child in children:
                view = _node_summary(child)
                views[child.id] = view
                parent_view = views[child.parent_id]
                parent_view.setdefault("children", {})[child.placement_leg] = view
            level = children

        for view in views.values():
            children = view.setdefault("children", {})
            for leg in BinaryLeg:
                children.setdefault(str(leg), None)

        return root_view

    async def get_earnings_summary(
        self, user_id: int, days: int = 30
    ) -> dict[str, Any]:
        """
        Binary earnings of a user.

        Returns:
            Totals, per-day earnings for the last ``days`` days and the
            current state of every account
        """
        days = max(1, days)
        total = await self.commission_repo.total_for_user(user_id)
        since = utc_today() - timedelta(days=days - 1)
        daily = await self.daily_repo.daily_totals(user_id, since)
        accounts = await self.node_repo.list_accounts(user_id)

        return {
            "user_id": user_id,
            "total_earned": str(total),
            "total_cycles": sum(a.total_cycles for a in accounts),
            "period_days": days,
            "period_earned": str(
                sum((amount for _, amount, _ in daily), Decimal("0"))
            ),
            "daily": [
                {"date": day.isoformat(), "amount": str(amount), "cycles": cycles}
                for day, amount, cycles in daily
            ],
            "accounts": [_node_summary(a) for a in accounts],
        }
