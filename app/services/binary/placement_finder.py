"""
Spillover placement search.

Level-order search for the first open slot below a node, visiting each
level left to right and the left leg before the right.
"""

from loguru import logger

from app.config.operational_constants import BINARY_MAX_SEARCH_DEPTH
from app.models.binary_node import BinaryNode
from app.models.enums import BinaryLeg
from app.repositories.binary_repository import BinaryNodeRepository
from app.utils.exceptions import NotFoundError, PlacementError


class PlacementFinder:
    """Finds open positions in the binary tree."""

    def __init__(
        self,
        node_repo: BinaryNodeRepository,
        max_depth: int = BINARY_MAX_SEARCH_DEPTH,
    ) -> None:
        self.node_repo = node_repo
        self.max_depth = max_depth

    async def find_spillover_spot(
        self, root_id: int, leg: BinaryLeg | str | None = None
    ) -> tuple[int, BinaryLeg]:
        """
        Find the first open ``(parent_id, leg)`` below ``root_id``.

        With ``leg`` given, the root's own slot on that leg is returned
        when empty; otherwise only that leg's subtree is searched.

        Args:
            root_id: Node to search below
            leg: Restrict the search to one leg of the root

        Returns:
            Tuple of (parent node id, free leg)

        Raises:
            NotFoundError: Root does not exist
            PlacementError: No open slot within the search depth
        """
        root = await self.node_repo.get_by_id(root_id)
        if root is None:
            raise NotFoundError(f"Binary node {root_id} not found")

        if leg is not None:
            leg = BinaryLeg(leg)
            child_id = root.child_id(leg)
            if child_id is None:
                return root.id, leg
            child = await self.node_repo.get_by_id(child_id)
            if child is None:
                # Dangling pointer; the slot is effectively free
                logger.warning(
                    "Binary child pointer references a missing node",
                    extra={"parent_id": root.id, "leg": leg, "child_id": child_id},
                )
                return root.id, leg
            frontier = [child]
        else:
            frontier = [root]

        for _ in range(self.max_depth):
            spot = self._first_open_slot(frontier)
            if spot is not None:
                return spot
            frontier = await self._next_level(frontier)
            if not frontier:
                break

        logger.error(
            "Spillover search exhausted",
            extra={"root_id": root_id, "leg": leg, "max_depth": self.max_depth},
        )
        raise PlacementError(
            f"No open position found below node {root_id}"
        )

    @staticmethod
    def _first_open_slot(
        level: list[BinaryNode],
    ) -> tuple[int, BinaryLeg] | None:
        for node in level:
            for side in BinaryLeg:
                if node.child_id(side) is None:
                    return node.id, side
        return None

    async def _next_level(self, level: list[BinaryNode]) -> list[BinaryNode]:
        child_ids = [
            child_id
            for node in level
            for child_id in (node.left_child_id, node.right_child_id)
            if child_id is not None
        ]
        nodes = await self.node_repo.get_many(child_ids)
        return [nodes[child_id] for child_id in child_ids if child_id in nodes]
