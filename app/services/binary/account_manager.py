"""
Binary multi-account manager.

Users own one main account and may open additional accounts up to the
configured limit, placed by spillover, inside a chosen leg, or under a
chosen downline.
"""

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.binary_node import BinaryNode
from app.models.enums import BinaryLeg, PlacementMode
from app.repositories.binary_repository import BinaryNodeRepository
from app.services.app_settings_service import AppSettingsService
from app.services.base_service import BaseService, transaction
from app.services.binary.placement_service import BinaryPlacementService
from app.utils.exceptions import (
    AccountLimitError,
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)


@dataclass
class DownlineSlot:
    """Downline node of the main account with its free legs."""

    node: BinaryNode
    free_legs: list[BinaryLeg]


class BinaryAccountManager(BaseService):
    """Lists and creates binary accounts of a user."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.node_repo = BinaryNodeRepository(session)
        self.placement = BinaryPlacementService(session)
        self.settings_service = AppSettingsService(session)

    async def list_accounts(self, user_id: int) -> list[BinaryNode]:
        """Accounts of a user ordered by account number."""
        return await self.node_repo.list_accounts(user_id)

    async def list_downlines(self, user_id: int) -> list[DownlineSlot]:
        """
        Nodes sponsored by the user's main account.

        Returns:
            Downlines with their free legs (empty without a main account)
        """
        main = await self.node_repo.get_main_account(user_id)
        if main is None:
            return []
        nodes = await self.node_repo.list_sponsored(main.id)
        return [DownlineSlot(node=node, free_legs=node.free_legs) for node in nodes]

    @transaction
    async def create_account(
        self,
        user_id: int,
        mode: PlacementMode | str,
        leg: BinaryLeg | str | None = None,
        downline_node_id: int | None = None,
    ) -> BinaryNode:
        """
        Open an additional account.

        Args:
            user_id: Account owner
            mode: spillover / left / right / downline
            leg: Free leg of the downline node (downline mode)
            downline_node_id: Node sponsored by the main account (downline mode)

        Returns:
            Created node

        Raises:
            NotFoundError: No main account, or downline not found
            AccountLimitError: Maximum number of accounts reached
            LegOccupiedError: Chosen downline leg is occupied
            ValidationError: Bad mode arguments
            ConflictError: Account number taken by a concurrent request
        """
        if settings.emergency_stop_placements:
            raise ServiceUnavailableError("Binary placements are temporarily disabled")

        try:
            mode = PlacementMode(mode)
        except ValueError as e:
            raise ValidationError(f"Unknown placement mode: {mode}") from e

        main = await self.node_repo.get_main_account(user_id)
        if main is None:
            raise NotFoundError("Main binary account not found")
        # Serializes account creation per user
        main = await self.node_repo.get_for_update(main.id)

        accounts = await self.node_repo.list_accounts(user_id)
        binary = await self.settings_service.get_binary_settings()
        if len(accounts) >= binary.max_accounts_per_user:
            raise AccountLimitError(
                f"Maximum of {binary.max_accounts_per_user} accounts reached"
            )
        account_number = len(accounts) + 1

        try:
            node = await self._place(
                user_id, account_number, main, mode, downline_node_id, leg
            )
        except IntegrityError as e:
            raise ConflictError(
                f"Account number {account_number} was taken concurrently, retry"
            ) from e

        self.logger.info(
            "Additional binary account created",
            extra={
                "user_id": user_id,
                "account_number": account_number,
                "mode": str(mode),
                "node_id": node.id,
            },
        )
        return node

    async def _place(
        self,
        user_id: int,
        account_number: int,
        main: BinaryNode,
        mode: PlacementMode,
        downline_node_id: int | None,
        leg: BinaryLeg | str | None,
    ) -> BinaryNode:
        if mode is PlacementMode.DOWNLINE:
            return await self._place_under_downline(
                user_id, account_number, main, downline_node_id, leg
            )
        return await self.placement.place_with_spillover(
            user_id=user_id,
            account_number=account_number,
            root_id=main.id,
            sponsor_id=main.id,
            leg=None if mode is PlacementMode.SPILLOVER else BinaryLeg(mode.value),
        )

    async def _place_under_downline(
        self,
        user_id: int,
        account_number: int,
        main: BinaryNode,
        downline_node_id: int | None,
        leg: BinaryLeg | str | None,
    ) -> BinaryNode:
        if downline_node_id is None or leg is None:
            raise ValidationError("Downline placement needs a node and a leg")
        try:
            leg = BinaryLeg(leg)
        except ValueError as e:
            raise ValidationError(f"Unknown leg: {leg}") from e

        target = await self.node_repo.get_by_id(downline_node_id)
        if target is None or target.sponsor_id != main.id:
            raise NotFoundError("Downline not found for this account")

        return await self.placement.place_node(
            user_id=user_id,
            account_number=account_number,
            parent_id=target.id,
            leg=leg,
            sponsor_id=main.id,
        )
