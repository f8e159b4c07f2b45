"""
Binary package purchase service.

Purchases arrive already paid; an admin approves them, which grants the
AI credits and enrolls the buyer in the binary network.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.binary_purchase import BinaryPackagePurchase
from app.models.enums import PurchaseStatus
from app.repositories.binary_repository import BinaryPurchaseRepository
from app.repositories.user_repository import UserRepository
from app.repositories.wallet_repository import WalletRepository
from app.services.app_settings_service import AppSettingsService
from app.services.base_service import BaseService, transaction
from app.services.binary.pending_placements import (
    BinaryEnrollmentService,
    EnrollmentResult,
)
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import ConflictError, NotFoundError, ValidationError
from calculator import BinaryCalculator, SafetyNetSplit


@dataclass
class ApprovalResult:
    purchase: BinaryPackagePurchase
    enrollment: EnrollmentResult
    split: SafetyNetSplit


class BinaryPurchaseService(BaseService):
    """Submits and reviews package purchases."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.purchase_repo = BinaryPurchaseRepository(session)
        self.user_repo = UserRepository(session)
        self.wallet_repo = WalletRepository(session)
        self.enrollment = BinaryEnrollmentService(session)
        self.settings_service = AppSettingsService(session)

    @transaction
    async def submit_purchase(
        self,
        user_id: int,
        amount: Decimal,
        credits: int,
        sponsor_user_id: int | None = None,
    ) -> BinaryPackagePurchase:
        """
        Record a paid package purchase awaiting approval.

        Args:
            user_id: Buyer
            amount: Paid amount
            credits: AI credits included in the package
            sponsor_user_id: Sponsor for the placement (referral sponsor when None)

        Returns:
            Pending purchase
        """
        if amount <= 0:
            raise ValidationError("Purchase amount must be positive")
        if credits < 0:
            raise ValidationError("Credits must not be negative")
        join_amount = (await self.settings_service.get_binary_settings()).join_amount
        if amount < join_amount:
            raise ValidationError(f"Purchase amount must be at least {join_amount}")

        buyer = await self.user_repo.get_by_id(user_id)
        if buyer is None:
            raise NotFoundError(f"User {user_id} not found")
        if sponsor_user_id is None:
            sponsor_user_id = buyer.referred_by_id
        if sponsor_user_id == user_id:
            raise ValidationError("Cannot sponsor yourself")

        purchase = await self.purchase_repo.create(
            user_id=user_id,
            sponsor_user_id=sponsor_user_id,
            amount=amount,
            credits_received=credits,
            status=PurchaseStatus.PENDING,
        )
        self.logger.info(
            "Binary purchase submitted",
            extra={
                "purchase_id": purchase.id,
                "user_id": user_id,
                "amount": str(amount),
            },
        )
        return purchase

    async def _get_pending(self, purchase_id: int) -> BinaryPackagePurchase:
        purchase = await self.purchase_repo.get_for_update(purchase_id)
        if purchase is None:
            raise NotFoundError("Purchase not found")
        if purchase.status != PurchaseStatus.PENDING:
            raise ConflictError(f"Purchase is already {purchase.status}")
        return purchase

    @transaction
    async def approve_purchase(
        self, purchase_id: int, admin_id: int, notes: str | None = None
    ) -> ApprovalResult:
        """
        Approve a purchase: grant credits and enroll the buyer.

        Raises:
            NotFoundError: Unknown purchase
            ConflictError: Purchase already reviewed
        """
        purchase = await self._get_pending(purchase_id)

        is_first = not await self.purchase_repo.has_approved_purchase(
            purchase.user_id
        )

        wallet = await self.wallet_repo.get_or_create(
            purchase.user_id, for_update=True
        )
        wallet.ai_credits += purchase.credits_received

        enrollment = await self.enrollment.enroll(
            user_id=purchase.user_id,
            sponsor_user_id=purchase.sponsor_user_id,
            amount=purchase.amount,
            purchase_id=purchase.id,
        )

        purchase.status = PurchaseStatus.APPROVED
        purchase.is_first_purchase = is_first
        purchase.approved_by = admin_id
        purchase.approved_at = utc_now()
        if notes:
            purchase.admin_notes = notes
        await self.session.flush()

        binary = await self.settings_service.get_binary_settings()
        split = BinaryCalculator().safety_net_split(
            purchase.amount, binary.admin_safety_net
        )

        self.logger.info(
            "Binary purchase approved",
            extra={
                "purchase_id": purchase.id,
                "admin_id": admin_id,
                "credits": purchase.credits_received,
                "first_purchase": is_first,
                "pending_placement": enrollment.is_pending,
                "admin_share": str(split.admin_share),
            },
        )
        return ApprovalResult(purchase=purchase, enrollment=enrollment, split=split)

    @transaction
    async def reject_purchase(
        self, purchase_id: int, admin_id: int, notes: str | None = None
    ) -> BinaryPackagePurchase:
        """Reject a pending purchase."""
        purchase = await self._get_pending(purchase_id)
        purchase.status = PurchaseStatus.REJECTED
        purchase.approved_by = admin_id
        purchase.approved_at = utc_now()
        purchase.admin_notes = notes
        await self.session.flush()
        self.logger.info(
            "Binary purchase rejected",
            extra={"purchase_id": purchase.id, "admin_id": admin_id},
        )
        return purchase

    async def list_purchases(
        self, status: str = PurchaseStatus.PENDING, limit: int = 50
    ) -> list[BinaryPackagePurchase]:
        return await self.purchase_repo.list_by_status(status, limit=limit)
