"""
Binary enrollment and pending placements.

New members take a free direct leg of their sponsor's main account.
When both legs are full the member waits in a pending placement until
the sponsor picks a leg.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.binary_node import BinaryNode
from app.models.binary_pending_placement import BinaryPendingPlacement
from app.models.enums import BinaryLeg, PendingPlacementStatus
from app.repositories.binary_repository import (
    BinaryNodeRepository,
    BinaryPendingPlacementRepository,
)
from app.services.base_service import BaseService, transaction
from app.services.binary.placement_service import BinaryPlacementService
from app.services.binary.volume_processor import BinaryVolumeProcessor
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ServiceUnavailableError,
    ValidationError,
)


@dataclass
class EnrollmentResult:
    """Either the placed main account or the pending placement."""

    node: BinaryNode | None = None
    pending: BinaryPendingPlacement | None = None
    created: bool = False

    @property
    def is_pending(self) -> bool:
        return self.pending is not None and self.node is None


class BinaryEnrollmentService(BaseService):
    """Enrolls members and resolves pending placements."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.node_repo = BinaryNodeRepository(session)
        self.pending_repo = BinaryPendingPlacementRepository(session)
        self.placement = BinaryPlacementService(session)
        self.volume = BinaryVolumeProcessor(session)

    @transaction
    async def enroll(
        self,
        user_id: int,
        sponsor_user_id: int | None = None,
        amount: Decimal | None = None,
        purchase_id: int | None = None,
    ) -> EnrollmentResult:
        """
        Give a user their main binary account.

        Args:
            user_id: New member
            sponsor_user_id: Sponsor (None or sponsor without account -> root)
            amount: Paid volume to credit (none without an approved purchase)
            purchase_id: Purchase that triggered the enrollment

        Returns:
            EnrollmentResult with the node, or the pending placement
        """
        existing = await self.node_repo.get_main_account(user_id)
        if existing is not None:
            return EnrollmentResult(node=existing)

        waiting = await self.pending_repo.get_pending_for_user(user_id)
        if waiting is not None:
            return EnrollmentResult(pending=waiting)

        if settings.emergency_stop_placements:
            raise ServiceUnavailableError("Binary placements are temporarily disabled")

        sponsor_node = None
        if sponsor_user_id is not None and sponsor_user_id != user_id:
            sponsor_node = await self.node_repo.get_main_account(sponsor_user_id)

        if sponsor_node is None:
            node = await self.placement.place_node(
                user_id=user_id,
                account_number=1,
                parent_id=None,
                leg=None,
                sponsor_id=None,
            )
            self.logger.info(
                "User enrolled as binary root",
                extra={"user_id": user_id, "sponsor_user_id": sponsor_user_id},
            )
            return EnrollmentResult(node=node, created=True)

        sponsor_node = await self.node_repo.get_for_update(sponsor_node.id)
        free_legs = sponsor_node.free_legs
        if free_legs:
            node = await self.placement.place_node(
                user_id=user_id,
                account_number=1,
                parent_id=sponsor_node.id,
                leg=free_legs[0],
                sponsor_id=sponsor_node.id,
            )
            if amount and amount > 0:
                await self.volume.credit_volume(node.id, amount)
            return EnrollmentResult(node=node, created=True)

        pending = await self.pending_repo.create(
            sponsor_user_id=sponsor_user_id,
            pending_user_id=user_id,
            purchase_id=purchase_id,
            amount=amount or Decimal("0"),
            status=PendingPlacementStatus.PENDING,
        )
        self.logger.info(
            "Sponsor legs full, placement pending",
            extra={
                "user_id": user_id,
                "sponsor_user_id": sponsor_user_id,
                "pending_id": pending.id,
            },
        )
        return EnrollmentResult(pending=pending, created=True)

    async def list_pending(
        self, sponsor_user_id: int
    ) -> list[BinaryPendingPlacement]:
        """Pending placements waiting for the sponsor, oldest first."""
        return await self.pending_repo.list_pending(sponsor_user_id)

    async def _get_owned_pending(
        self, pending_id: int, sponsor_user_id: int
    ) -> BinaryPendingPlacement:
        pending = await self.pending_repo.get_for_update(pending_id)
        if pending is None:
            raise NotFoundError("Pending placement not found")
        if pending.sponsor_user_id != sponsor_user_id:
            raise PermissionDeniedError("Only the sponsor can manage this placement")
        if pending.status != PendingPlacementStatus.PENDING:
            raise ConflictError(f"Placement is already {pending.status}")
        return pending

    @transaction
    async def resolve_pending(
        self,
        pending_id: int,
        sponsor_user_id: int,
        leg: BinaryLeg | str,
    ) -> BinaryNode:
        """
        Place a pending member inside the chosen leg of the sponsor.

        The member goes to the spillover spot of that leg and the
        pending amount is credited as volume.

        Raises:
            NotFoundError: Unknown placement or sponsor without account
            PermissionDeniedError: Caller is not the sponsor
            ConflictError: Placement no longer pending
        """
        try:
            leg = BinaryLeg(leg)
        except ValueError as e:
            raise ValidationError(f"Unknown leg: {leg}") from e

        if settings.emergency_stop_placements:
            raise ServiceUnavailableError("Binary placements are temporarily disabled")

        pending = await self._get_owned_pending(pending_id, sponsor_user_id)

        if await self.node_repo.get_main_account(pending.pending_user_id):
            raise ConflictError("Member already has a binary account")

        sponsor_node = await self.node_repo.get_main_account(sponsor_user_id)
        if sponsor_node is None:
            raise NotFoundError("Sponsor has no binary account")

        node = await self.placement.place_with_spillover(
            user_id=pending.pending_user_id,
            account_number=1,
            root_id=sponsor_node.id,
            sponsor_id=sponsor_node.id,
            leg=leg,
        )

        pending.status = PendingPlacementStatus.PLACED
        pending.chosen_leg = str(leg)
        pending.placed_node_id = node.id
        pending.placed_at = utc_now()
        await self.session.flush()

        if pending.amount and pending.amount > 0:
            await self.volume.credit_volume(node.id, pending.amount)

        self.logger.info(
            "Pending placement resolved",
            extra={
                "pending_id": pending_id,
                "node_id": node.id,
                "leg": str(leg),
            },
        )
        return node

    @transaction
    async def cancel_pending(
        self, pending_id: int, sponsor_user_id: int
    ) -> BinaryPendingPlacement:
        """Cancel a pending placement (sponsor only)."""
        pending = await self._get_owned_pending(pending_id, sponsor_user_id)
        pending.status = PendingPlacementStatus.CANCELLED
        await self.session.flush()
        self.logger.info(
            "Pending placement cancelled",
            extra={"pending_id": pending_id, "sponsor_user_id": sponsor_user_id},
        )
        return pending
