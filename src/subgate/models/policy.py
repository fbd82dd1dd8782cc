"""
Instance-wide policy snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

# Plugin setting names
SETTING_REMOVE_SUBSCRIBE_BUTTON = "remove-subscribe-button"
SETTING_DEFAULT_SUBSCRIBER_ONLY = "default-subscriber-only"
SETTING_DEFAULT_DENY_DOWNLOAD = "default-deny-download"
SETTING_GLOBAL_SUBSCRIBER_ONLY = "global-subscriber-only"
SETTING_GLOBAL_DENY_DOWNLOAD = "global-deny-download"

POLICY_SETTING_NAMES = (SETTING_GLOBAL_SUBSCRIBER_ONLY, SETTING_GLOBAL_DENY_DOWNLOAD)


class PolicyConfig(BaseModel):
    """
    Global overrides; when true they replace per-video flags entirely.

    Instances are immutable. A settings change produces a new snapshot,
    so a decision that captured one keeps a consistent view.
    """

    global_subscriber_only: bool = False
    global_deny_download: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def has_override(self) -> bool:
        """True when either global override is active."""
        return self.global_subscriber_only or self.global_deny_download

    @classmethod
    def from_settings(cls, entries: Mapping[str, Any]) -> "PolicyConfig":
        """Build a snapshot from setting entries; only a literal ``True`` enables."""
        return cls(
            global_subscriber_only=entries.get(SETTING_GLOBAL_SUBSCRIBER_ONLY) is True,
            global_deny_download=entries.get(SETTING_GLOBAL_DENY_DOWNLOAD) is True,
        )
