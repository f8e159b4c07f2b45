"""
User model.

Represents a registered member of the affiliate network.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base

if TYPE_CHECKING:
    from app.models.binary_node import BinaryNode
    from app.models.wallet import Wallet


class User(Base):
    """User model - network members and admins."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            'referred_by_id IS NULL OR referred_by_id <> id',
            name='check_user_not_self_referred'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Identity
    username: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )
    email: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    full_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    referral_code: Mapped[str | None] = mapped_column(
        String(20), nullable=True, unique=True, index=True
    )

    # Sponsor (referral tree, not binary placement)
    referred_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Status flags
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    # Relationships
    referred_by: Mapped[Optional["User"]] = relationship(
        "User",
        remote_side=[id],
        back_populates="referrals",
        foreign_keys=[referred_by_id],
    )
    referrals: Mapped[list["User"]] = relationship(
        "User",
        back_populates="referred_by",
        foreign_keys=[referred_by_id]
    )

    wallet: Mapped["Wallet | None"] = relationship(
        "Wallet",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    binary_accounts: Mapped[list["BinaryNode"]] = relationship(
        "BinaryNode",
        back_populates="user",
        order_by="BinaryNode.account_number",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, username={self.username}, "
            f"referred_by_id={self.referred_by_id})>"
        )
