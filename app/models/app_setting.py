"""
AppSetting model.

Admin-tunable key/value configuration of the compensation plans.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class AppSetting(Base):
    """
    AppSetting entity.

    Values are stored as text and parsed by the typed settings bundles
    in ``app.services.app_settings_service``.

    Attributes:
        id: Primary key
        key: Unique setting name (e.g. ``binary_cycle_volume``)
        value: Raw value
        description: Optional admin note
        updated_by: User id of the admin who changed it last
        updated_at: Last change time
    """

    __tablename__ = "app_settings"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    key: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True
    )
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AppSetting(key={self.key}, value={self.value})>"
