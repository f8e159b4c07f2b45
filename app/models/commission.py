"""
Commission models.

Referral commissions (unilevel and order) and stair-step leadership
commissions (differential and breakaway).
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import CommissionStatus
from app.models.types import MoneyType, PercentType


class Commission(Base):
    """
    Commission entity.

    Earned by an upline from a downline's purchase (unilevel) or order
    (order commission pool).
    """

    __tablename__ = "commissions"
    __table_args__ = (
        CheckConstraint('amount >= 0', name='check_commission_non_negative'),
        CheckConstraint('level >= 1', name='check_commission_level_positive'),
        Index("idx_commission_user_status", "user_id", "status"),
        Index("idx_commission_order", "order_id"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    from_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    order_id: Mapped[int | None] = mapped_column(
        ForeignKey("orders.id", ondelete="SET NULL"), nullable=True
    )
    purchase_id: Mapped[int | None] = mapped_column(
        ForeignKey("binary_package_purchases.id", ondelete="SET NULL"),
        nullable=True,
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    percentage: Mapped[Decimal] = mapped_column(
        PercentType, default=Decimal("0"), nullable=False
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    commission_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=CommissionStatus.PENDING, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<Commission(id={self.id}, user_id={self.user_id}, "
            f"type={self.commission_type}, level={self.level}, "
            f"amount={self.amount})>"
        )


class LeadershipCommission(Base):
    """Stair-step differential or breakaway commission."""

    __tablename__ = "leadership_commissions"
    __table_args__ = (
        CheckConstraint(
            'amount >= 0', name='check_leadership_commission_non_negative'
        ),
        Index("idx_leadership_upline_status", "upline_id", "status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    upline_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    downline_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    sales_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    percentage: Mapped[Decimal] = mapped_column(
        PercentType, default=Decimal("0"), nullable=False
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    commission_type: Mapped[str] = mapped_column(String(20), nullable=False)
    order_id: Mapped[int | None] = mapped_column(
        ForeignKey("orders.id", ondelete="SET NULL"), nullable=True
    )
    purchase_id: Mapped[int | None] = mapped_column(
        ForeignKey("binary_package_purchases.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), default=CommissionStatus.PENDING, nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
