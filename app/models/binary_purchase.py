"""
BinaryPackagePurchase model.

Already-paid package purchase that enrolls the buyer in the binary
network once an admin approves it.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import PurchaseStatus
from app.models.types import MoneyType


class BinaryPackagePurchase(Base):
    """
    BinaryPackagePurchase entity.

    Attributes:
        id: Primary key
        user_id: Buyer
        sponsor_user_id: Sponsor given at purchase time (may differ from
            the referral sponsor for first purchases)
        amount: Paid amount
        credits_received: AI credits granted on approval
        status: pending / approved / rejected
        is_first_purchase: True when this purchase enrolled the buyer
        commissions_distributed: Purchase commissions were paid
        admin_notes: Reviewer notes
        approved_by: Reviewing admin
        approved_at: Review time
    """

    __tablename__ = "binary_package_purchases"
    __table_args__ = (
        CheckConstraint('amount > 0', name='check_purchase_amount_positive'),
        CheckConstraint(
            'credits_received >= 0',
            name='check_purchase_credits_non_negative'
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sponsor_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    credits_received: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=PurchaseStatus.PENDING,
        nullable=False,
        index=True,
    )
    is_first_purchase: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    commissions_distributed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<BinaryPackagePurchase(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
