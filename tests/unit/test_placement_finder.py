"""
Unit tests for the spillover search and placement retries.

Runs against an in-memory node repository so the search order can be
checked on hand-built trees.
"""

from unittest.mock import AsyncMock

import pytest

from app.config.operational_constants import PLACEMENT_MAX_RETRIES
from app.models.binary_node import BinaryNode
from app.models.enums import BinaryLeg
from app.services.binary.placement_finder import PlacementFinder
from app.services.binary.placement_service import BinaryPlacementService
from app.utils.exceptions import LegOccupiedError, NotFoundError, PlacementError


class FakeNodeRepository:
    """Dict-backed stand-in for BinaryNodeRepository."""

    def __init__(self) -> None:
        self.nodes: dict[int, BinaryNode] = {}

    def add(self, node_id, parent_id=None, leg=None) -> BinaryNode:
        node = BinaryNode(
            id=node_id,
            user_id=node_id,
            account_number=1,
            parent_id=parent_id,
            placement_leg=leg,
        )
        self.nodes[node_id] = node
        if parent_id is not None:
            parent = self.nodes[parent_id]
            if leg == "left":
                parent.left_child_id = node_id
            else:
                parent.right_child_id = node_id
        return node

    async def get_by_id(self, node_id):
        return self.nodes.get(node_id)

    async def get_many(self, ids):
        return {i: self.nodes[i] for i in ids if i in self.nodes}


@pytest.fixture
def repo():
    return FakeNodeRepository()


class TestFindSpilloverSpot:
    """Level-order search, left before right."""

    async def test_empty_root_takes_left_first(self, repo):
        repo.add(1)

        spot = await PlacementFinder(repo).find_spillover_spot(1)

        assert spot == (1, BinaryLeg.LEFT)

    async def test_fills_level_before_going_deeper(self, repo):
        """
        Tree:        1
                   /   \\
                  2     3
                 / \\
                4   5

        The next open slot is node 3's left, not below node 4.
        """
        repo.add(1)
        repo.add(2, 1, "left")
        repo.add(3, 1, "right")
        repo.add(4, 2, "left")
        repo.add(5, 2, "right")

        spot = await PlacementFinder(repo).find_spillover_spot(1)

        assert spot == (3, BinaryLeg.LEFT)

    async def test_right_slot_of_same_node(self, repo):
        repo.add(1)
        repo.add(2, 1, "left")

        spot = await PlacementFinder(repo).find_spillover_spot(1)

        assert spot == (1, BinaryLeg.RIGHT)

    async def test_leg_restricted_free_root_slot(self, repo):
        repo.add(1)
        repo.add(2, 1, "left")

        spot = await PlacementFinder(repo).find_spillover_spot(1, "right")

        assert spot == (1, BinaryLeg.RIGHT)

    async def test_leg_restricted_searches_only_that_subtree(self, repo):
        """Right leg full at the root: search continues under node 3 only."""
        repo.add(1)
        repo.add(2, 1, "left")
        repo.add(3, 1, "right")

        spot = await PlacementFinder(repo).find_spillover_spot(1, BinaryLeg.RIGHT)

        assert spot == (3, BinaryLeg.LEFT)

    async def test_dangling_child_pointer_counts_as_free(self, repo):
        root = repo.add(1)
        root.left_child_id = 99

        spot = await PlacementFinder(repo).find_spillover_spot(1, "left")

        assert spot == (1, BinaryLeg.LEFT)

    async def test_unknown_root(self, repo):
        with pytest.raises(NotFoundError):
            await PlacementFinder(repo).find_spillover_spot(42)

    async def test_depth_exhausted(self, repo):
        """A full tree deeper than the search bound raises PlacementError."""
        repo.add(1)
        repo.add(2, 1, "left")
        repo.add(3, 1, "right")

        with pytest.raises(PlacementError):
            await PlacementFinder(repo, max_depth=1).find_spillover_spot(1)


class TestSpilloverRetry:
    """Placement repeats the search when a slot is taken concurrently."""

    @pytest.fixture
    def service(self, mock_session):
        return BinaryPlacementService(mock_session)

    async def test_taken_slot_is_searched_again(self, service):
        node = BinaryNode(id=9, user_id=9, account_number=1)
        service.find_spillover_spot = AsyncMock(
            side_effect=[(2, BinaryLeg.LEFT), (3, BinaryLeg.RIGHT)]
        )
        service.place_node = AsyncMock(side_effect=[LegOccupiedError(), node])

        placed = await service.place_with_spillover(9, 1, root_id=1, sponsor_id=1)

        assert placed is node
        assert service.find_spillover_spot.await_count == 2
        assert service.place_node.await_args.kwargs["parent_id"] == 3
        assert service.place_node.await_args.kwargs["leg"] == BinaryLeg.RIGHT

    async def test_gives_up_after_max_retries(self, service):
        service.find_spillover_spot = AsyncMock(return_value=(2, BinaryLeg.LEFT))
        service.place_node = AsyncMock(side_effect=LegOccupiedError())

        with pytest.raises(PlacementError):
            await service.place_with_spillover(9, 1, root_id=1, sponsor_id=1)

        assert service.place_node.await_count == PLACEMENT_MAX_RETRIES
