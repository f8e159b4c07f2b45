"""
AppSetting repository.

Data access layer for admin-tunable key/value settings.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.app_setting import AppSetting
from app.repositories.base import BaseRepository


class AppSettingRepository(BaseRepository[AppSetting]):
    """AppSetting repository."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AppSetting, session)

    async def get_values(self, keys: list[str] | None = None) -> dict[str, str]:
        """
        Load raw values.

        Args:
            keys: Keys to load (all settings when None)

        Returns:
            Mapping key -> raw string value for keys that exist
        """
        stmt = select(AppSetting.key, AppSetting.value)
        if keys is not None:
            stmt = stmt.where(AppSetting.key.in_(keys))
        result = await self.session.execute(stmt)
        return {key: value for key, value in result.all()}

    async def upsert(
        self,
        key: str,
        value: str,
        updated_by: int | None = None,
        description: str | None = None,
    ) -> AppSetting:
        """
        Insert or update one setting.

        Args:
            key: Setting key
            value: Raw value
            updated_by: Admin user id
            description: Optional description (kept when None)

        Returns:
            Stored setting
        """
        setting = await self.get_by(key=key)
        if setting is None:
            return await self.create(
                key=key,
                value=value,
                updated_by=updated_by,
                description=description,
            )

        setting.value = value
        setting.updated_by = updated_by
        if description is not None:
            setting.description = description
        await self.session.flush()
        return setting
