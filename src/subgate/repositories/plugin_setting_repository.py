"""
Plugin setting repository.

Persists the values of the registered plugin settings.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import PluginSetting
from .base import KeyValueRepository


class PluginSettingRepository(KeyValueRepository[PluginSetting]):
    """Repository for persisted plugin setting values."""

    def __init__(self, plugin_name: str) -> None:
        super().__init__(PluginSetting, "name", plugin_name)

    async def get_settings(
        self, session: AsyncSession, names: Iterable[str]
    ) -> Dict[str, Any]:
        """Get stored values for the given setting names; unset names are omitted."""
        return await self.get_values(session, names)

    async def store_setting(self, session: AsyncSession, name: str, value: Any) -> None:
        """Insert or replace a setting value."""
        await self.store_value(session, name, value)
