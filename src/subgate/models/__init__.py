"""
Data models module for subgate.

Defines Pydantic models for per-video flags, the instance policy snapshot,
access decisions and the video payloads exchanged with the host.
"""

from __future__ import annotations

from .access import (
    DOWNLOADS_DISABLED_MESSAGE,
    SUBSCRIBERS_ONLY_MESSAGE,
    AccessDecision,
    ChannelMembership,
    DownloadPermission,
)
from .enums import AccessReason, UserRole, VideoFieldType
from .flags import (
    PLUGIN_BLOCKED_FLAG,
    VIDEO_FIELD_DENY_DOWNLOAD,
    VIDEO_FIELD_SUBSCRIBER_ONLY,
    EffectiveFlags,
    VideoFlags,
    extract_flags_from_body,
    normalize_flag,
)
from .policy import PolicyConfig
from .video import ChannelRef, VideoListResult, VideoRecord

__all__ = [
    # Access
    "AccessDecision",
    "ChannelMembership",
    "DownloadPermission",
    "DOWNLOADS_DISABLED_MESSAGE",
    "SUBSCRIBERS_ONLY_MESSAGE",
    # Enums
    "AccessReason",
    "UserRole",
    "VideoFieldType",
    # Flags
    "EffectiveFlags",
    "VideoFlags",
    "extract_flags_from_body",
    "normalize_flag",
    "PLUGIN_BLOCKED_FLAG",
    "VIDEO_FIELD_DENY_DOWNLOAD",
    "VIDEO_FIELD_SUBSCRIBER_ONLY",
    # Policy
    "PolicyConfig",
    # Video
    "ChannelRef",
    "VideoListResult",
    "VideoRecord",
]
