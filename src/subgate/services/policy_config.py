"""
Policy configuration provider.

Holds the current ``PolicyConfig`` snapshot. A settings change builds a new
immutable snapshot and swaps the reference in one assignment, so a reader
sees either the old or the new policy and never a mix of the two.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from subgate.models.policy import POLICY_SETTING_NAMES, PolicyConfig
from subgate.services.interfaces import SettingsManagerInterface

logger = logging.getLogger(__name__)


class PolicyConfigProvider:
    """Atomically replaced holder of the instance-wide policy snapshot."""

    def __init__(self, initial: PolicyConfig | None = None) -> None:
        self._current = initial or PolicyConfig()

    @property
    def current(self) -> PolicyConfig:
        """The snapshot to use for one decision; capture it once per request."""
        return self._current

    def apply_settings(self, entries: Mapping[str, Any]) -> PolicyConfig:
        """
        Replace the snapshot from a settings mapping.

        Parameters
        ----------
        entries : Mapping[str, Any]
            Setting entries; only the two global override names are read.

        Returns
        -------
        PolicyConfig
            The newly installed snapshot.
        """
        snapshot = PolicyConfig.from_settings(entries)
        if snapshot != self._current:
            logger.info(
                "Policy updated: global_subscriber_only=%s global_deny_download=%s",
                snapshot.global_subscriber_only,
                snapshot.global_deny_download,
            )
        self._current = snapshot
        return snapshot

    async def load(self, settings_manager: SettingsManagerInterface) -> PolicyConfig:
        """Read the override settings once (startup) and install the snapshot."""
        entries = await settings_manager.get_settings(POLICY_SETTING_NAMES)
        return self.apply_settings(entries)

    def subscribe(self, settings_manager: SettingsManagerInterface) -> None:
        """Refresh the snapshot on every settings-change notification."""

        async def _on_change(entries: dict[str, Any]) -> None:
            self.apply_settings(entries)

        settings_manager.on_settings_change(_on_change)
