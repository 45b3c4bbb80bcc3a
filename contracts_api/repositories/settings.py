from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime, timezone
from typing import Optional, Any, Dict

from contracts_api.models.system_settings import SystemSettingStore


class SettingsRepository:
    """Flat key-value settings grouped by category."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, category: str) -> Optional[Dict[str, Any]]:
        result = await self.db.execute(
            select(SystemSettingStore).where(SystemSettingStore.category == category)
        )
        row = result.scalar_one_or_none()
        return dict(row.settings_data) if row else None

    async def put(self, category: str, data: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.db.execute(
            select(SystemSettingStore).where(SystemSettingStore.category == category)
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = SystemSettingStore(category=category)
            self.db.add(row)
        row.settings_data = data
        row.updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        return data
