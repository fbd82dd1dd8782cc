"""
Base repository for namespaced key-value tables.

Both the per-video flag storage and the plugin settings live in tables
keyed by ``(pluginName, <key>)`` with a JSON value; this base provides the
read, batch-read and upsert operations they share.
"""

from __future__ import annotations

from typing import Any, Dict, Generic, Iterable, Optional, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import PluginSetting, PluginStorage

ModelType = TypeVar("ModelType", bound=Union[PluginStorage, PluginSetting])


class KeyValueRepository(Generic[ModelType]):
    """
    Key-value repository scoped to one plugin namespace.

    Parameters
    ----------
    model : type[ModelType]
        Mapped class with ``plugin_name`` and ``value`` columns.
    key_attribute : str
        Name of the mapped attribute holding the key.
    plugin_name : str
        Namespace every read and write is confined to.
    """

    def __init__(
        self, model: type[ModelType], key_attribute: str, plugin_name: str
    ) -> None:
        self.model = model
        self.plugin_name = plugin_name
        self._key_column = getattr(model, key_attribute)
        self._key_attribute = key_attribute

    async def get_row(self, session: AsyncSession, key: str) -> Optional[ModelType]:
        """Get the row stored under a key, if any."""
        result = await session.execute(
            select(self.model).where(
                self.model.plugin_name == self.plugin_name,
                self._key_column == key,
            )
        )
        return result.scalar_one_or_none()

    async def get_value(self, session: AsyncSession, key: str) -> Optional[Any]:
        """Get the raw value stored under a key, or None."""
        row = await self.get_row(session, key)
        return row.value if row is not None else None

    async def get_values(
        self, session: AsyncSession, keys: Iterable[str]
    ) -> Dict[str, Any]:
        """
        Get the raw values for many keys in one query.

        Parameters
        ----------
        session : AsyncSession
            Database session
        keys : Iterable[str]
            Keys to read; duplicates are collapsed

        Returns
        -------
        Dict[str, Any]
            Mapping of key to stored value; keys with no row are omitted
        """
        unique_keys = list(dict.fromkeys(keys))
        if not unique_keys:
            return {}

        result = await session.execute(
            select(self._key_column, self.model.value).where(
                self.model.plugin_name == self.plugin_name,
                self._key_column.in_(unique_keys),
            )
        )
        return {key: value for key, value in result.all()}

    async def store_value(self, session: AsyncSession, key: str, value: Any) -> ModelType:
        """Insert or replace the value stored under a key."""
        row = await self.get_row(session, key)
        if row is None:
            row = self.model(plugin_name=self.plugin_name, value=value)
            setattr(row, self._key_attribute, key)
            session.add(row)
        else:
            row.value = value
        await session.flush()
        return row
