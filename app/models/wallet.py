"""
Wallet models.

Point balances, the cash wallet with its PIN, cash ledger and payout
requests.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

import bcrypt
from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import PayoutStatus
from app.models.types import MoneyType

if TYPE_CHECKING:
    from app.models.user import User


class Wallet(Base):
    """
    Wallet entity - one per user.

    Attributes:
        credits: Game credits (integer currency)
        diamonds: Diamonds (integer currency)
        ai_credits: Credits spent on AI content generation
        cash_balance: Withdrawable cash
        pin_hash: bcrypt hash of the 4-digit cash PIN
        pin_attempts: Consecutive wrong PIN entries
        pin_locked_until: Lock expiry after too many wrong entries
    """

    __tablename__ = "wallets"
    __table_args__ = (
        CheckConstraint('credits >= 0', name='check_wallet_credits_non_negative'),
        CheckConstraint(
            'diamonds >= 0', name='check_wallet_diamonds_non_negative'
        ),
        CheckConstraint(
            'ai_credits >= 0', name='check_wallet_ai_credits_non_negative'
        ),
        CheckConstraint(
            'cash_balance >= 0', name='check_wallet_cash_non_negative'
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    # Balances
    credits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    diamonds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ai_credits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cash_balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Cash PIN
    pin_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pin_attempts: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    pin_locked_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    user: Mapped["User"] = relationship("User", back_populates="wallet")

    @property
    def has_pin(self) -> bool:
        return bool(self.pin_hash)

    def set_pin(self, pin: str) -> None:
        """
        Set cash PIN with bcrypt hashing.

        Args:
            pin: Plain text PIN to hash and store
        """
        self.pin_hash = bcrypt.hashpw(pin.encode(), bcrypt.gensalt()).decode()

    def verify_pin(self, pin: str) -> bool:
        """
        Verify cash PIN against stored hash.

        Args:
            pin: Plain text PIN to verify

        Returns:
            True if PIN matches, False otherwise
        """
        if not self.pin_hash:
            return False
        return bcrypt.checkpw(pin.encode(), self.pin_hash.encode())

    def __repr__(self) -> str:
        return (
            f"<Wallet(user_id={self.user_id}, credits={self.credits}, "
            f"diamonds={self.diamonds}, ai_credits={self.ai_credits}, "
            f"cash={self.cash_balance})>"
        )


class CashTransaction(Base):
    """Cash wallet ledger entry. Amount is signed."""

    __tablename__ = "cash_transactions"
    __table_args__ = (
        Index("idx_cash_tx_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    transaction_type: Mapped[str] = mapped_column(String(30), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    reference_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )


class PayoutRequest(Base):
    """Cash withdrawal awaiting admin processing."""

    __tablename__ = "payout_requests"
    __table_args__ = (
        CheckConstraint('amount > 0', name='check_payout_amount_positive'),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    payout_account: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=PayoutStatus.PENDING, nullable=False, index=True
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    processed_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
