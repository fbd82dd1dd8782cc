"""
Database-backed plugin settings manager.

Reads and writes the registered plugin settings through
``PluginSettingRepository`` and notifies listeners after every change.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subgate.exceptions import UnknownSettingError
from subgate.models.flags import normalize_flag
from subgate.plugin.settings import SETTING_DEFINITIONS, SettingDefinition
from subgate.repositories.plugin_setting_repository import PluginSettingRepository
from subgate.services.interfaces import (
    SettingsChangeCallback,
    SettingsManagerInterface,
)

logger = logging.getLogger(__name__)


class DatabaseSettingsManager(SettingsManagerInterface):
    """
    Settings manager persisting values in the ``pluginSetting`` table.

    Parameters
    ----------
    session_factory : async_sessionmaker[AsyncSession]
        Factory producing one session per read or write.
    repository : PluginSettingRepository
        Storage access for the plugin namespace.
    definitions : Sequence[SettingDefinition]
        Registered settings; unknown names are rejected on update.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository: PluginSettingRepository,
        definitions: Sequence[SettingDefinition] = SETTING_DEFINITIONS,
    ) -> None:
        self._session_factory = session_factory
        self._repository = repository
        self._definitions = {definition.name: definition for definition in definitions}
        self._callbacks: List[SettingsChangeCallback] = []

    @property
    def setting_names(self) -> List[str]:
        """Names of every registered setting, in registration order."""
        return list(self._definitions)

    async def get_settings(self, names: Iterable[str]) -> Dict[str, Any]:
        names = list(names)
        async with self._session_factory() as session:
            stored = await self._repository.get_settings(session, names)

        values: Dict[str, Any] = {}
        for name in names:
            if name in stored:
                values[name] = stored[name]
            elif name in self._definitions:
                values[name] = self._definitions[name].default
            else:
                values[name] = None
        return values

    async def get_all_settings(self) -> Dict[str, Any]:
        """Get every registered setting, defaults filled in."""
        return await self.get_settings(self.setting_names)

    async def update_settings(self, entries: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Persist new setting values and notify listeners.

        Parameters
        ----------
        entries : Mapping[str, Any]
            Setting name to raw value. Checkbox values go through the flag
            normalization; a value that is not a recognised encoding is
            stored as False.

        Returns
        -------
        Dict[str, Any]
            Every registered setting after the update.

        Raises
        ------
        UnknownSettingError
            If an entry names a setting that is not registered. Nothing is
            written in that case.
        """
        for name in entries:
            if name not in self._definitions:
                raise UnknownSettingError(name)

        async with self._session_factory() as session:
            for name, raw in entries.items():
                await self._repository.store_setting(session, name, self._coerce(name, raw))
            await session.commit()

        logger.info("Updated plugin settings: %s", ", ".join(sorted(entries)))

        current = await self.get_all_settings()
        await self._notify(current)
        return current

    def on_settings_change(self, callback: SettingsChangeCallback) -> None:
        self._callbacks.append(callback)

    def _coerce(self, name: str, raw: Any) -> Any:
        if self._definitions[name].type == "input-checkbox":
            return bool(normalize_flag(raw))
        return raw

    async def _notify(self, current: Dict[str, Any]) -> None:
        for callback in list(self._callbacks):
            try:
                await callback(dict(current))
            except Exception:
                logger.error("Settings change listener failed", exc_info=True)
