"""
Binary placement service.

Creates nodes and links them to their parent under a row lock on the
parent.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.operational_constants import PLACEMENT_MAX_RETRIES
from app.models.binary_node import BinaryNode
from app.models.enums import BinaryLeg
from app.repositories.binary_repository import BinaryNodeRepository
from app.services.base_service import BaseService
from app.services.binary.placement_finder import PlacementFinder
from app.utils.exceptions import (
    LegOccupiedError,
    NotFoundError,
    PlacementError,
)


class BinaryPlacementService(BaseService):
    """
    Places accounts in the binary tree.

    Methods flush but do not commit; callers own the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.node_repo = BinaryNodeRepository(session)
        self.finder = PlacementFinder(self.node_repo)

    async def find_spillover_spot(
        self, root_id: int, leg: BinaryLeg | str | None = None
    ) -> tuple[int, BinaryLeg]:
        return await self.finder.find_spillover_spot(root_id, leg)

    async def place_node(
        self,
        user_id: int,
        account_number: int,
        parent_id: int | None,
        leg: BinaryLeg | str | None,
        sponsor_id: int | None,
    ) -> BinaryNode:
        """
        Create a node and attach it to ``parent_id`` on ``leg``.

        The parent row is locked and the slot re-checked before the
        child pointer is written. ``parent_id=None`` creates a root.

        Args:
            user_id: Account owner
            account_number: Account number for the user
            parent_id: Placement parent (None for a root)
            leg: Side of the parent
            sponsor_id: Node that referred the account

        Returns:
            Created node

        Raises:
            NotFoundError: Parent does not exist
            LegOccupiedError: Slot already taken
        """
        parent = None
        if parent_id is not None:
            if leg is None:
                raise PlacementError("Leg is required when a parent is given")
            leg = BinaryLeg(leg)
            parent = await self.node_repo.get_for_update(parent_id)
            if parent is None:
                raise NotFoundError(f"Binary node {parent_id} not found")
            if parent.child_id(leg) is not None:
                raise LegOccupiedError(
                    f"The {leg} leg of node {parent_id} is already occupied"
                )

        node = await self.node_repo.create(
            user_id=user_id,
            account_number=account_number,
            parent_id=parent.id if parent else None,
            placement_leg=str(leg) if parent else None,
            sponsor_id=sponsor_id,
        )

        if parent is not None:
            parent.set_child(leg, node.id)
            await self.session.flush()

        self.logger.info(
            "Binary node placed",
            extra={
                "node_id": node.id,
                "user_id": user_id,
                "account_number": account_number,
                "parent_id": parent_id,
                "leg": str(leg) if leg else None,
                "sponsor_id": sponsor_id,
            },
        )
        return node

    async def place_with_spillover(
        self,
        user_id: int,
        account_number: int,
        root_id: int,
        sponsor_id: int | None,
        leg: BinaryLeg | str | None = None,
    ) -> BinaryNode:
        """
        Place below ``root_id`` at the first open spillover spot.

        The search is repeated when a concurrent placement took the slot
        between search and lock.

        Raises:
            PlacementError: No slot could be claimed
        """
        for attempt in range(1, PLACEMENT_MAX_RETRIES + 1):
            parent_id, spot_leg = await self.find_spillover_spot(root_id, leg)
            try:
                return await self.place_node(
                    user_id=user_id,
                    account_number=account_number,
                    parent_id=parent_id,
                    leg=spot_leg,
                    sponsor_id=sponsor_id,
                )
            except LegOccupiedError:
                self.logger.warning(
                    "Spillover slot taken concurrently, retrying",
                    extra={
                        "root_id": root_id,
                        "parent_id": parent_id,
                        "leg": str(spot_leg),
                        "attempt": attempt,
                    },
                )

        raise PlacementError(
            f"Could not claim a position below node {root_id} "
            f"after {PLACEMENT_MAX_RETRIES} attempts"
        )
