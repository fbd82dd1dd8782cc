"""
Plugin setting definitions.

Five checkbox settings are registered. Only the two global overrides are
enforced server-side; the default-* settings pre-fill the per-video form
fields and remove-subscribe-button is purely cosmetic on the client.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field

from subgate.models.policy import (
    SETTING_DEFAULT_DENY_DOWNLOAD,
    SETTING_DEFAULT_SUBSCRIBER_ONLY,
    SETTING_GLOBAL_DENY_DOWNLOAD,
    SETTING_GLOBAL_SUBSCRIBER_ONLY,
    SETTING_REMOVE_SUBSCRIBE_BUTTON,
)


class SettingDefinition(BaseModel):
    """Registration payload for one plugin setting."""

    name: str
    label: str
    type: str = "input-checkbox"
    private: bool = False
    default: Any = False
    description_html: str = Field(default="", serialization_alias="descriptionHTML")

    model_config = ConfigDict(frozen=True)

    def to_registration(self) -> Dict[str, Any]:
        """Return the mapping handed to the host's setting registration."""
        return self.model_dump(by_alias=True)


SETTING_DEFINITIONS: Tuple[SettingDefinition, ...] = (
    SettingDefinition(
        name=SETTING_REMOVE_SUBSCRIBE_BUTTON,
        label="Remove subscribe button",
        description_html="Remove the subscribe button on video and channel pages.",
    ),
    SettingDefinition(
        name=SETTING_DEFAULT_SUBSCRIBER_ONLY,
        label="Default: Subscribers only",
        description_html='Default value for "Subscribers only" on video upload/creation.',
    ),
    SettingDefinition(
        name=SETTING_DEFAULT_DENY_DOWNLOAD,
        label="Default: Deny downloads",
        description_html='Default value for "Deny downloads" on video upload/creation.',
    ),
    SettingDefinition(
        name=SETTING_GLOBAL_SUBSCRIBER_ONLY,
        label="Global: Subscribers only",
        description_html=(
            "Force all videos to be subscribers-only (overrides per-video setting)."
        ),
    ),
    SettingDefinition(
        name=SETTING_GLOBAL_DENY_DOWNLOAD,
        label="Global: Deny downloads",
        description_html=(
            "Force downloads to be disabled for all videos (overrides per-video setting)."
        ),
    ),
)

SETTINGS_BY_NAME: Dict[str, SettingDefinition] = {
    definition.name: definition for definition in SETTING_DEFINITIONS
}


def default_settings() -> Dict[str, Any]:
    """Return every registered setting mapped to its default value."""
    return {definition.name: definition.default for definition in SETTING_DEFINITIONS}
