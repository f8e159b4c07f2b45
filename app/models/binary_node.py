"""
BinaryNode model.

One position in the binary placement tree. A user may own several
nodes (accounts); account #1 is the main account.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import BinaryLeg
from app.models.types import MoneyType

if TYPE_CHECKING:
    from app.models.user import User


class BinaryNode(Base):
    """
    BinaryNode entity.

    Attributes:
        id: Primary key
        user_id: Owner of the account
        account_number: 1..N per user
        sponsor_id: Node that referred this account
        parent_id: Placement parent (None for a root)
        placement_leg: Side of the parent this node occupies
        left_child_id: Node placed directly on the left
        right_child_id: Node placed directly on the right
        left_volume: Unmatched volume carried on the left leg
        right_volume: Unmatched volume carried on the right leg
        total_cycles: Lifetime matched cycles
        joined_at: Placement time
    """

    __tablename__ = "binary_network"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "account_number", name="uq_binary_user_account"
        ),
        UniqueConstraint(
            "parent_id", "placement_leg", name="uq_binary_parent_leg"
        ),
        CheckConstraint(
            'left_volume >= 0', name='check_binary_left_volume_non_negative'
        ),
        CheckConstraint(
            'right_volume >= 0', name='check_binary_right_volume_non_negative'
        ),
        CheckConstraint(
            'account_number >= 1', name='check_binary_account_number_positive'
        ),
        CheckConstraint(
            "(parent_id IS NULL AND placement_leg IS NULL) OR "
            "(parent_id IS NOT NULL AND placement_leg IN ('left', 'right'))",
            name='check_binary_parent_leg_consistent'
        ),
        Index("idx_binary_sponsor", "sponsor_id"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account_number: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1
    )

    # Tree links
    sponsor_id: Mapped[int | None] = mapped_column(
        ForeignKey("binary_network.id", ondelete="SET NULL"), nullable=True
    )
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("binary_network.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    placement_leg: Mapped[str | None] = mapped_column(
        String(5), nullable=True
    )
    left_child_id: Mapped[int | None] = mapped_column(
        ForeignKey("binary_network.id", ondelete="SET NULL"), nullable=True
    )
    right_child_id: Mapped[int | None] = mapped_column(
        ForeignKey("binary_network.id", ondelete="SET NULL"), nullable=True
    )

    # Volumes
    left_volume: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    right_volume: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_cycles: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    user: Mapped["User"] = relationship(
        "User", back_populates="binary_accounts"
    )

    def child_id(self, leg: BinaryLeg | str) -> int | None:
        """Child id on ``leg``."""
        if BinaryLeg(leg) is BinaryLeg.LEFT:
            return self.left_child_id
        return self.right_child_id

    def set_child(self, leg: BinaryLeg | str, child_id: int | None) -> None:
        if BinaryLeg(leg) is BinaryLeg.LEFT:
            self.left_child_id = child_id
        else:
            self.right_child_id = child_id

    def volume(self, leg: BinaryLeg | str) -> Decimal:
        if BinaryLeg(leg) is BinaryLeg.LEFT:
            return self.left_volume
        return self.right_volume

    def add_volume(self, leg: BinaryLeg | str, amount: Decimal) -> None:
        if BinaryLeg(leg) is BinaryLeg.LEFT:
            self.left_volume = (self.left_volume or Decimal("0")) + amount
        else:
            self.right_volume = (self.right_volume or Decimal("0")) + amount

    @property
    def free_legs(self) -> list[BinaryLeg]:
        """Legs without a direct child, left first."""
        return [leg for leg in BinaryLeg if self.child_id(leg) is None]

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def __repr__(self) -> str:
        return (
            f"<BinaryNode(id={self.id}, user_id={self.user_id}, "
            f"account={self.account_number}, parent_id={self.parent_id}, "
            f"leg={self.placement_leg})>"
        )
