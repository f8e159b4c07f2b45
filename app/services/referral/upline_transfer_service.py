"""
Upline transfer service.

Members request a new referral sponsor; admins approve or reject.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import TransferStatus
from app.models.upline_transfer_request import UplineTransferRequest
from app.repositories.upline_transfer_repository import UplineTransferRepository
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService, transaction
from app.services.referral.chain_manager import ReferralChainManager
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import ConflictError, NotFoundError, ValidationError


class UplineTransferService(BaseService):
    """Sponsor change requests."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.transfer_repo = UplineTransferRepository(session)
        self.user_repo = UserRepository(session)
        self.chain = ReferralChainManager(session)

    async def _check_target(self, user_id: int, requested_upline_id: int) -> None:
        if requested_upline_id == user_id:
            raise ValidationError("Cannot transfer under yourself")
        if await self.user_repo.get_by_id(requested_upline_id) is None:
            raise NotFoundError("Requested upline not found")
        # the new sponsor must not sit below the user
        if await self.chain.is_in_downline(user_id, requested_upline_id):
            raise ValidationError("Requested upline is in your downline")

    @transaction
    async def request_transfer(
        self,
        user_id: int,
        requested_upline_id: int,
        reason: str | None = None,
    ) -> UplineTransferRequest:
        """
        Create a transfer request.

        Raises:
            NotFoundError: Unknown user or requested upline
            ValidationError: Self or downline requested, or same sponsor
            ConflictError: A pending request already exists
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        if user.referred_by_id == requested_upline_id:
            raise ValidationError("Already under this upline")

        await self._check_target(user_id, requested_upline_id)

        if await self.transfer_repo.get_pending_for_user(user_id):
            raise ConflictError("A transfer request is already pending")

        request = await self.transfer_repo.create(
            user_id=user_id,
            current_upline_id=user.referred_by_id,
            requested_upline_id=requested_upline_id,
            reason=reason,
            status=TransferStatus.PENDING,
        )
        self.logger.info(
            "Upline transfer requested",
            extra={
                "request_id": request.id,
                "user_id": user_id,
                "requested_upline_id": requested_upline_id,
            },
        )
        return request

    async def list_requests(
        self, status: str | None = None, limit: int = 50
    ) -> list[UplineTransferRequest]:
        return await self.transfer_repo.list_by_status(status, limit=limit)

    async def list_for_user(self, user_id: int) -> list[UplineTransferRequest]:
        return await self.transfer_repo.list_for_user(user_id)

    @transaction
    async def process(
        self,
        request_id: int,
        admin_id: int,
        approve: bool,
        notes: str | None = None,
    ) -> UplineTransferRequest:
        """
        Approve or reject a pending request.

        Approval re-checks the loop condition against the current tree
        and moves the user under the requested sponsor.

        Raises:
            NotFoundError: Unknown request
            ConflictError: Request already processed
            ValidationError: Approval would create a loop
        """
        request = await self.transfer_repo.get_for_update(request_id)
        if request is None:
            raise NotFoundError("Transfer request not found")
        if request.status != TransferStatus.PENDING:
            raise ConflictError(f"Request is already {request.status}")

        if approve:
            await self._check_target(request.user_id, request.requested_upline_id)
            user = await self.user_repo.get_for_update(request.user_id)
            if user is None:
                raise NotFoundError("User not found")
            user.referred_by_id = request.requested_upline_id
            request.status = TransferStatus.APPROVED
        else:
            request.status = TransferStatus.REJECTED

        request.admin_notes = notes
        request.processed_by = admin_id
        request.processed_at = utc_now()
        await self.session.flush()

        self.logger.info(
            "Upline transfer processed",
            extra={
                "request_id": request_id,
                "admin_id": admin_id,
                "status": request.status,
            },
        )
        return request
