"""
Stair-step plan models.

Step configuration, each affiliate's current rank, monthly sales
totals and the rank qualification history.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.config.business_constants import (
    DEFAULT_MONTHS_TO_QUALIFY,
    QualificationType,
)
from app.models.base import Base
from app.models.types import MoneyType, PercentType


class StairStepConfig(Base):
    """
    StairStepConfig entity.

    Attributes:
        step_number: Rank position, 1 is the lowest step
        step_name: Display name
        commission_percentage: Rate earned on sales in the downline
        sales_quota: Monthly volume required to qualify
        months_to_qualify: Consecutive months after which the rank is fixed
        breakaway_percentage: Override paid to leaders (top step)
        qualification_type: personal / group / combined
        active: Disabled steps are ignored by evaluation and payouts
    """

    __tablename__ = "stair_step_config"
    __table_args__ = (
        CheckConstraint('step_number >= 1', name='check_step_number_positive'),
        CheckConstraint(
            'commission_percentage >= 0 AND commission_percentage <= 100',
            name='check_step_commission_range'
        ),
        CheckConstraint(
            'breakaway_percentage >= 0 AND breakaway_percentage <= 100',
            name='check_step_breakaway_range'
        ),
        CheckConstraint('sales_quota >= 0', name='check_step_quota_non_negative'),
        CheckConstraint(
            'months_to_qualify >= 1', name='check_step_months_positive'
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    step_number: Mapped[int] = mapped_column(
        Integer, unique=True, nullable=False
    )
    step_name: Mapped[str] = mapped_column(String(100), nullable=False)
    commission_percentage: Mapped[Decimal] = mapped_column(
        PercentType, nullable=False
    )
    sales_quota: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    months_to_qualify: Mapped[int] = mapped_column(
        Integer, default=DEFAULT_MONTHS_TO_QUALIFY, nullable=False
    )
    breakaway_percentage: Mapped[Decimal] = mapped_column(
        PercentType, default=Decimal("0"), nullable=False
    )
    qualification_type: Mapped[str] = mapped_column(
        String(20), default=QualificationType.PERSONAL, nullable=False
    )
    active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<StairStepConfig(step={self.step_number}, "
            f"name={self.step_name}, rate={self.commission_percentage})>"
        )


class AffiliateCurrentRank(Base):
    """Current stair-step rank of one affiliate."""

    __tablename__ = "affiliate_current_rank"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    current_step: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )  # 0 = unranked
    qualification_count: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    is_fixed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    last_qualified_step: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    last_qualified_at: Mapped[date | None] = mapped_column(
        Date, nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )


class AffiliateMonthlySales(Base):
    """Sales totals of one affiliate for one calendar month."""

    __tablename__ = "affiliate_monthly_sales"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "sales_month", name="uq_monthly_sales_user_month"
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    sales_month: Mapped[date] = mapped_column(Date, nullable=False)
    personal_sales: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    team_sales: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_sales: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )


class AffiliateRankHistory(Base):
    """One qualification (or reversion) event."""

    __tablename__ = "affiliate_rank_history"
    __table_args__ = (
        Index("idx_rank_history_user_month", "user_id", "qualified_month"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    step_number: Mapped[int] = mapped_column(Integer, nullable=False)
    qualified_month: Mapped[date] = mapped_column(Date, nullable=False)
    sales_volume: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    qualification_count: Mapped[int] = mapped_column(
        Integer, default=1, nullable=False
    )
    is_fixed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    reverted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
