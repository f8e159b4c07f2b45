"""
Binary volume processor.

Propagates purchase volume up the placement chain and pays cycle
commissions under the per-account daily cap.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.operational_constants import CHAIN_MAX_DEPTH
from app.models.binary_node import BinaryNode
from app.models.enums import BinaryLeg
from app.repositories.binary_repository import (
    BinaryAutoReplenishRepository,
    BinaryCommissionRepository,
    BinaryDailyEarningRepository,
    BinaryNodeRepository,
)
from app.repositories.wallet_repository import WalletRepository
from app.services.app_settings_service import AppSettingsService, BinarySettings
from app.services.base_service import BaseService
from app.utils.datetime_utils import utc_today
from app.utils.exceptions import NotFoundError, ValidationError
from calculator import BinaryCalculator


@dataclass
class CyclePayout:
    """Commission produced for one ancestor."""

    node_id: int
    user_id: int
    cycles: int
    paid: Decimal
    flushed: Decimal
    replenished_credits: int = 0


@dataclass
class VolumeResult:
    """Outcome of crediting volume from one node."""

    node_id: int
    amount: Decimal
    ancestors_updated: int = 0
    payouts: list[CyclePayout] = field(default_factory=list)

    @property
    def total_paid(self) -> Decimal:
        return sum((p.paid for p in self.payouts), Decimal("0"))


class BinaryVolumeProcessor(BaseService):
    """
    Credits volume and matches cycles.

    Methods flush but do not commit; callers own the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.node_repo = BinaryNodeRepository(session)
        self.commission_repo = BinaryCommissionRepository(session)
        self.daily_repo = BinaryDailyEarningRepository(session)
        self.replenish_repo = BinaryAutoReplenishRepository(session)
        self.wallet_repo = WalletRepository(session)
        self.settings_service = AppSettingsService(session)

    async def credit_volume(self, node_id: int, amount: Decimal) -> VolumeResult:
        """
        Add ``amount`` to every ancestor of ``node_id``.

        Each ancestor gets the volume on the leg it came from, then its
        legs are matched into cycles and the commission is paid.

        Args:
            node_id: Node whose purchase generated the volume
            amount: Volume to credit

        Returns:
            VolumeResult with per-ancestor payouts

        Raises:
            ValidationError: Non-positive amount
            NotFoundError: Unknown node
        """
        if amount <= 0:
            raise ValidationError("Volume amount must be positive")

        node = await self.node_repo.get_by_id(node_id)
        if node is None:
            raise NotFoundError(f"Binary node {node_id} not found")

        binary = await self.settings_service.get_binary_settings()
        calculator = BinaryCalculator(cycle_volume=binary.cycle_volume)
        result = VolumeResult(node_id=node_id, amount=amount)

        visited = {node.id}
        parent_id, leg = node.parent_id, node.placement_leg
        while parent_id is not None and leg is not None:
            if parent_id in visited or len(visited) > CHAIN_MAX_DEPTH:
                self.logger.error(
                    "Binary parent chain is cyclic or too deep",
                    extra={"node_id": node_id, "parent_id": parent_id},
                )
                break
            visited.add(parent_id)

            ancestor = await self.node_repo.get_for_update(parent_id)
            if ancestor is None:
                break

            ancestor.add_volume(BinaryLeg(leg), amount)
            result.ancestors_updated += 1

            payout = await self._match_cycles(ancestor, binary, calculator)
            if payout is not None:
                result.payouts.append(payout)

            parent_id, leg = ancestor.parent_id, ancestor.placement_leg

        await self.session.flush()

        self.logger.info(
            "Binary volume credited",
            extra={
                "node_id": node_id,
                "amount": str(amount),
                "ancestors": result.ancestors_updated,
                "payouts": len(result.payouts),
                "total_paid": str(result.total_paid),
            },
        )
        return result

    async def _match_cycles(
        self,
        node: BinaryNode,
        binary: BinarySettings,
        calculator: BinaryCalculator,
    ) -> CyclePayout | None:
        match = calculator.match_cycles(node.left_volume, node.right_volume)
        if match.cycles == 0:
            return None

        node.left_volume = match.left_remaining
        node.right_volume = match.right_remaining
        node.total_cycles = (node.total_cycles or 0) + match.cycles

        today = utc_today()
        earned_today = await self.daily_repo.earned_on(node.id, today)
        capped = calculator.cap_commission(
            match.cycles, binary.cycle_commission, binary.daily_cap, earned_today
        )
        payout = CyclePayout(
            node_id=node.id,
            user_id=node.user_id,
            cycles=match.cycles,
            paid=capped.paid,
            flushed=capped.flushed,
        )

        if capped.is_capped:
            self.logger.info(
                "Binary daily cap reached, commission flushed",
                extra={
                    "node_id": node.id,
                    "gross": str(capped.gross),
                    "flushed": str(capped.flushed),
                },
            )

        if capped.paid <= 0:
            return payout

        replenish_credits = 0
        if binary.auto_replenish_enabled and binary.auto_replenish_percent > 0:
            replenish_credits = int(capped.paid * binary.auto_replenish_percent / 100)

        commission = await self.commission_repo.create(
            node_id=node.id,
            user_id=node.user_id,
            amount=capped.paid - replenish_credits,
            flushed_amount=capped.flushed,
            cycles_matched=match.cycles,
            left_volume_used=match.volume_used,
            right_volume_used=match.volume_used,
        )
        await self.daily_repo.add_earning(
            node_id=node.id,
            user_id=node.user_id,
            earning_date=today,
            amount=capped.paid,
            cycles=match.cycles,
            flushed=capped.flushed,
        )

        if replenish_credits > 0:
            wallet = await self.wallet_repo.get_or_create(
                node.user_id, for_update=True
            )
            wallet.ai_credits += replenish_credits
            await self.replenish_repo.create(
                user_id=node.user_id,
                commission_id=commission.id,
                amount=Decimal(replenish_credits),
                credits_added=replenish_credits,
            )
            payout.replenished_credits = replenish_credits

        return payout
