"""
Binary compensation models.

Cycle commissions, per-day earnings used for the daily cap, and
auto-replenish conversions into AI credits.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import CommissionStatus
from app.models.types import MoneyType


class BinaryCommission(Base):
    """Commission paid for matched cycles on one account."""

    __tablename__ = "binary_commissions"
    __table_args__ = (
        CheckConstraint(
            'amount >= 0', name='check_binary_commission_non_negative'
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    node_id: Mapped[int] = mapped_column(
        ForeignKey("binary_network.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    flushed_amount: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    cycles_matched: Mapped[int] = mapped_column(Integer, nullable=False)
    left_volume_used: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    right_volume_used: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=CommissionStatus.PENDING, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )


class BinaryDailyEarning(Base):
    """Per-account running total of binary earnings for one day."""

    __tablename__ = "binary_daily_earnings"
    __table_args__ = (
        UniqueConstraint(
            "node_id", "earning_date", name="uq_binary_daily_node_date"
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    node_id: Mapped[int] = mapped_column(
        ForeignKey("binary_network.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    earning_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_earned: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    cycles: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    flushed_amount: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )


class BinaryAutoReplenish(Base):
    """Part of a binary payout converted into AI credits."""

    __tablename__ = "binary_auto_replenish"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    commission_id: Mapped[int] = mapped_column(
        ForeignKey("binary_commissions.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    credits_added: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
