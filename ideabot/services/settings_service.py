"""Service for persisted bot settings."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..orm.base import utcnow
from ..orm.setting import BotSetting
from .database import DatabaseService

logger = logging.getLogger(__name__)

DAILY_REMINDER_KEY = "daily_reminder_enabled"


class SettingsService:
    """Key/value feature toggles stored in ``bot_settings``."""

    def __init__(self, db: DatabaseService):
        self.db = db

    async def get(self, key: str) -> str | None:
        async def fetch(session: AsyncSession) -> str | None:
            result = await session.execute(
                select(BotSetting.setting_value).where(BotSetting.setting_key == key).limit(1)
            )
            return result.scalar_one_or_none()

        return await self.db.run(fetch)

    async def set(self, key: str, value: str) -> None:
        """Insert or update ``key``."""

        async def upsert(session: AsyncSession) -> None:
            result = await session.execute(select(BotSetting).where(BotSetting.setting_key == key))
            setting = result.scalar_one_or_none()
            if setting is None:
                session.add(BotSetting(setting_key=key, setting_value=value))
            else:
                setting.setting_value = value
                setting.updated_at = utcnow()

        await self.db.run(upsert)

    async def get_daily_reminder_enabled(self) -> bool:
        """Daily reminders are on unless explicitly switched off."""
        value = await self.get(DAILY_REMINDER_KEY)
        if value is None:
            return True
        return value == "true"

    async def set_daily_reminder_enabled(self, enabled: bool) -> None:
        await self.set(DAILY_REMINDER_KEY, "true" if enabled else "false")
        logger.info("Daily reminder status updated: enabled=%s", enabled)
