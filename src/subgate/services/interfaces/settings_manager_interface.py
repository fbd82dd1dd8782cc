"""
Abstract Base Class for plugin settings access.

The host owns setting registration and persistence; subgate only reads
values and listens for changes through this contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Dict

SettingsChangeCallback = Callable[[Dict[str, Any]], Awaitable[None]]


class SettingsManagerInterface(ABC):
    """
    Abstract interface for reading plugin settings and observing changes.

    Examples
    --------
    >>> class StaticSettings(SettingsManagerInterface):
    ...     async def get_settings(self, names):
    ...         return {name: False for name in names}
    ...     def on_settings_change(self, callback):
    ...         pass
    """

    @abstractmethod
    async def get_settings(self, names: Iterable[str]) -> Dict[str, Any]:
        """
        Get the current values of the named settings.

        Parameters
        ----------
        names : Iterable[str]
            Setting names to read.

        Returns
        -------
        Dict[str, Any]
            Mapping of setting name to value; unset settings carry their
            registered default.
        """
        pass

    @abstractmethod
    def on_settings_change(self, callback: SettingsChangeCallback) -> None:
        """
        Register a coroutine called with the full settings mapping after every change.

        Parameters
        ----------
        callback : SettingsChangeCallback
            Coroutine function receiving the new settings entries.
        """
        pass
