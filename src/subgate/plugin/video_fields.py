"""
Per-video form fields.

Two checkboxes are shown on every video form: "Subscribers only" and
"Disable downloads". A field is hidden while the matching global override
is on, and its initial value comes from the matching default-* setting.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from subgate.models.enums import VideoFieldType
from subgate.models.flags import VIDEO_FIELD_DENY_DOWNLOAD, VIDEO_FIELD_SUBSCRIBER_ONLY
from subgate.models.policy import (
    SETTING_DEFAULT_DENY_DOWNLOAD,
    SETTING_DEFAULT_SUBSCRIBER_ONLY,
    SETTING_GLOBAL_DENY_DOWNLOAD,
    SETTING_GLOBAL_SUBSCRIBER_ONLY,
)

VIDEO_FIELD_TAB = "plugin-settings"


class VideoField(BaseModel):
    """One checkbox registered on one video form type."""

    name: str
    label: str
    type: str = "input-checkbox"
    hidden: bool = False
    default: bool = False
    description_html: str = Field(default="", serialization_alias="descriptionHTML")
    form_type: VideoFieldType = Field(serialization_alias="formType")
    tab: str = VIDEO_FIELD_TAB

    model_config = ConfigDict(frozen=True)


def build_video_fields(settings: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """
    Build the field descriptors for every video form type.

    Parameters
    ----------
    settings : Mapping[str, Any]
        Current plugin settings. Only a literal ``True`` enables a setting.

    Returns
    -------
    List[Dict[str, Any]]
        Two descriptors per form type, subscriber-only first.
    """
    global_subscriber_only = settings.get(SETTING_GLOBAL_SUBSCRIBER_ONLY) is True
    global_deny_download = settings.get(SETTING_GLOBAL_DENY_DOWNLOAD) is True
    default_subscriber_only = settings.get(SETTING_DEFAULT_SUBSCRIBER_ONLY) is True
    default_deny_download = settings.get(SETTING_DEFAULT_DENY_DOWNLOAD) is True

    fields: List[Dict[str, Any]] = []
    for form_type in VideoFieldType:
        fields.append(
            VideoField(
                name=VIDEO_FIELD_SUBSCRIBER_ONLY,
                label="Subscribers only",
                hidden=global_subscriber_only,
                default=default_subscriber_only,
                description_html="Limit playback to subscribers of this channel.",
                form_type=form_type,
            ).model_dump(by_alias=True, mode="json")
        )
        fields.append(
            VideoField(
                name=VIDEO_FIELD_DENY_DOWNLOAD,
                label="Disable downloads",
                hidden=global_deny_download,
                default=default_deny_download,
                description_html="Prevent all users from downloading this video.",
                form_type=form_type,
            ).model_dump(by_alias=True, mode="json")
        )
    return fields
