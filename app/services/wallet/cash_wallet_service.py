"""
Cash wallet service.

PIN protection, deposits, withdrawals to payout accounts and the cash
ledger.
"""

from datetime import timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import CASH_PIN_LENGTH
from app.config.operational_constants import PIN_LOCK_MINUTES, PIN_MAX_ATTEMPTS
from app.config.settings import settings
from app.models.enums import CashTransactionType, PayoutStatus
from app.models.wallet import CashTransaction, PayoutRequest, Wallet
from app.repositories.wallet_repository import (
    CashTransactionRepository,
    PayoutRequestRepository,
    WalletRepository,
)
from app.services.app_settings_service import AppSettingsService
from app.services.base_service import BaseService, transaction
from app.utils.datetime_utils import ensure_utc, utc_now
from app.utils.exceptions import (
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
    PermissionDeniedError,
    PinLockedError,
    ServiceUnavailableError,
    ValidationError,
)


def validate_pin_format(pin: str) -> None:
    if not pin or len(pin) != CASH_PIN_LENGTH or not pin.isdigit():
        raise ValidationError(f"PIN must be {CASH_PIN_LENGTH} digits")


def wallet_balances(wallet: Wallet) -> dict[str, Any]:
    return {
        "credits": wallet.credits,
        "diamonds": wallet.diamonds,
        "ai_credits": wallet.ai_credits,
        "cash_balance": str(wallet.cash_balance),
        "has_pin": wallet.has_pin,
    }


class CashWalletService(BaseService):
    """Cash balance operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.wallet_repo = WalletRepository(session)
        self.cash_repo = CashTransactionRepository(session)
        self.payout_repo = PayoutRequestRepository(session)
        self.settings_service = AppSettingsService(session)

    @transaction
    async def get_balances(self, user_id: int) -> dict[str, Any]:
        wallet = await self.wallet_repo.get_or_create(user_id)
        return wallet_balances(wallet)

    @transaction
    async def verify_pin(self, user_id: int, pin: str) -> bool:
        """
        Check the PIN, counting failed attempts.

        Too many wrong attempts lock the wallet for a while. Attempt
        counters are committed even when the PIN is wrong.

        Returns:
            True if the PIN matches

        Raises:
            ValidationError: No PIN set
            PinLockedError: Wallet locked after failed attempts
        """
        wallet = await self.wallet_repo.get_or_create(user_id, for_update=True)
        if not wallet.has_pin:
            raise ValidationError("Cash PIN is not set")

        now = utc_now()
        locked_until = ensure_utc(wallet.pin_locked_until)
        if locked_until and locked_until > now:
            raise PinLockedError(
                f"PIN locked until {locked_until.isoformat(timespec='minutes')}"
            )

        if wallet.verify_pin(pin):
            wallet.pin_attempts = 0
            wallet.pin_locked_until = None
            await self.session.flush()
            return True

        wallet.pin_attempts += 1
        if wallet.pin_attempts >= PIN_MAX_ATTEMPTS:
            wallet.pin_locked_until = now + timedelta(minutes=PIN_LOCK_MINUTES)
            wallet.pin_attempts = 0
            self.logger.warning(
                "Cash PIN locked after failed attempts",
                extra={"user_id": user_id},
            )
        await self.session.flush()
        return False

    async def _require_pin(self, user_id: int, pin: str | None) -> None:
        if pin is None or not await self.verify_pin(user_id, pin):
            raise PermissionDeniedError("Invalid PIN")

    async def set_pin(
        self, user_id: int, pin: str, current_pin: str | None = None
    ) -> None:
        """
        Set or change the cash PIN.

        Raises:
            ValidationError: PIN is not 4 digits
            PermissionDeniedError: Current PIN missing or wrong
        """
        validate_pin_format(pin)
        wallet = await self.wallet_repo.get_or_create(user_id)
        if wallet.has_pin:
            await self._require_pin(user_id, current_pin)
        await self._store_pin(user_id, pin)

    @transaction
    async def _store_pin(self, user_id: int, pin: str) -> None:
        wallet = await self.wallet_repo.get_or_create(user_id, for_update=True)
        wallet.set_pin(pin)
        wallet.pin_attempts = 0
        wallet.pin_locked_until = None
        await self.session.flush()
        self.logger.info("Cash PIN set", extra={"user_id": user_id})

    async def _add_cash(
        self,
        wallet: Wallet,
        amount: Decimal,
        transaction_type: str,
        reference_id: int | None = None,
        description: str | None = None,
    ) -> CashTransaction:
        wallet.cash_balance += amount
        await self.session.flush()
        return await self.cash_repo.create(
            user_id=wallet.user_id,
            transaction_type=transaction_type,
            amount=amount,
            balance_after=wallet.cash_balance,
            reference_id=reference_id,
            description=description,
        )

    @transaction
    async def deposit(
        self,
        user_id: int,
        amount: Decimal,
        admin_id: int,
        description: str | None = None,
    ) -> CashTransaction:
        """Credit an admin-confirmed cash deposit."""
        if amount <= 0:
            raise ValidationError("Deposit amount must be positive")
        wallet = await self.wallet_repo.get_or_create(user_id, for_update=True)
        entry = await self._add_cash(
            wallet,
            amount,
            CashTransactionType.DEPOSIT,
            description=description or f"Deposit confirmed by admin {admin_id}",
        )
        self.logger.info(
            "Cash deposit credited",
            extra={"user_id": user_id, "amount": str(amount), "admin_id": admin_id},
        )
        return entry

    async def request_withdrawal(
        self,
        user_id: int,
        amount: Decimal,
        pin: str,
        payout_account: str,
    ) -> PayoutRequest:
        """
        Withdraw cash to a payout account.

        The balance is deducted now and refunded if an admin rejects
        the payout.

        Raises:
            ServiceUnavailableError: Withdrawals stopped
            ValidationError: Not positive, below minimum or missing payout account
            PermissionDeniedError: Wrong PIN
            PinLockedError: PIN locked
            InsufficientBalanceError: Not enough cash
        """
        if settings.emergency_stop_withdrawals:
            raise ServiceUnavailableError("Withdrawals are temporarily disabled")

        if amount <= 0:
            raise ValidationError("Withdrawal amount must be positive")
        cash = await self.settings_service.get_cash_settings()
        if amount < cash.min_withdrawal:
            raise ValidationError(f"Minimum withdrawal is {cash.min_withdrawal}")
        if not payout_account or not payout_account.strip():
            raise ValidationError("Payout account is required")

        await self._require_pin(user_id, pin)
        return await self._create_payout(user_id, amount, payout_account.strip())

    @transaction
    async def _create_payout(
        self, user_id: int, amount: Decimal, payout_account: str
    ) -> PayoutRequest:
        wallet = await self.wallet_repo.get_or_create(user_id, for_update=True)
        if wallet.cash_balance < amount:
            raise InsufficientBalanceError(
                f"Insufficient cash balance: {wallet.cash_balance} < {amount}"
            )

        payout = await self.payout_repo.create(
            user_id=user_id,
            amount=amount,
            payout_account=payout_account,
            status=PayoutStatus.PENDING,
        )
        await self._add_cash(
            wallet,
            -amount,
            CashTransactionType.WITHDRAWAL,
            reference_id=payout.id,
            description="Withdrawal request",
        )
        self.logger.info(
            "Withdrawal requested",
            extra={"user_id": user_id, "amount": str(amount), "payout_id": payout.id},
        )
        return payout

    @transaction
    async def process_payout(
        self,
        payout_id: int,
        admin_id: int,
        approve: bool,
        notes: str | None = None,
    ) -> PayoutRequest:
        """
        Approve or reject a pending payout. Rejection refunds the cash.

        Raises:
            NotFoundError: Unknown payout
            ConflictError: Payout already processed
        """
        payout = await self.payout_repo.get_for_update(payout_id)
        if payout is None:
            raise NotFoundError("Payout request not found")
        if payout.status != PayoutStatus.PENDING:
            raise ConflictError(f"Payout is already {payout.status}")

        if approve:
            payout.status = PayoutStatus.APPROVED
        else:
            payout.status = PayoutStatus.REJECTED
            wallet = await self.wallet_repo.get_or_create(
                payout.user_id, for_update=True
            )
            await self._add_cash(
                wallet,
                payout.amount,
                CashTransactionType.WITHDRAWAL_REFUND,
                reference_id=payout.id,
                description="Withdrawal rejected",
            )

        payout.processed_by = admin_id
        payout.processed_at = utc_now()
        payout.admin_notes = notes
        await self.session.flush()

        self.logger.info(
            "Payout processed",
            extra={
                "payout_id": payout_id,
                "admin_id": admin_id,
                "status": payout.status,
            },
        )
        return payout

    async def history(self, user_id: int, limit: int = 50) -> list[CashTransaction]:
        return await self.cash_repo.list_for_user(user_id, limit=limit)

    async def list_payouts(
        self, status: str = PayoutStatus.PENDING, limit: int = 50
    ) -> list[PayoutRequest]:
        return await self.payout_repo.list_by_status(status, limit=limit)
