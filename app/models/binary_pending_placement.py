"""
BinaryPendingPlacement model.

A new member waiting for the sponsor to pick a leg because both of the
sponsor's direct legs were already occupied.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import PendingPlacementStatus
from app.models.types import MoneyType


class BinaryPendingPlacement(Base):
    """Pending placement awaiting the sponsor's leg choice."""

    __tablename__ = "binary_pending_placements"
    __table_args__ = (
        Index(
            "idx_pending_placement_sponsor_status",
            "sponsor_user_id",
            "status",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    sponsor_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    pending_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    purchase_id: Mapped[int | None] = mapped_column(
        ForeignKey("binary_package_purchases.id", ondelete="SET NULL"),
        nullable=True,
    )
    amount: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=PendingPlacementStatus.PENDING, nullable=False
    )
    chosen_leg: Mapped[str | None] = mapped_column(String(5), nullable=True)
    placed_node_id: Mapped[int | None] = mapped_column(
        ForeignKey("binary_network.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    placed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<BinaryPendingPlacement(id={self.id}, "
            f"sponsor={self.sponsor_user_id}, user={self.pending_user_id}, "
            f"status={self.status})>"
        )
