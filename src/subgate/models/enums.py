"""
Enums for subgate models.

Defines enumeration types used across the application for consistent
type safety and validation.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class AccessReason(str, Enum):
    """Why an access decision came out the way it did."""

    OK = "ok"  # no restriction applies
    NOT_AUTHENTICATED = "not_authenticated"
    NOT_SUBSCRIBED = "not_subscribed"
    ADMIN_BYPASS = "admin_bypass"
    OWNER_BYPASS = "owner_bypass"
    FOLLOWER_BYPASS = "follower_bypass"
    LOOKUP_FAILED = "lookup_failed"


class UserRole(IntEnum):
    """Host user roles; only ADMINISTRATOR carries a bypass."""

    ADMINISTRATOR = 0
    MODERATOR = 1
    USER = 2


class VideoFieldType(str, Enum):
    """Video creation/edit forms that carry the per-video flag fields."""

    UPDATE = "update"
    UPLOAD = "upload"
    IMPORT_URL = "import-url"
    IMPORT_TORRENT = "import-torrent"
    GO_LIVE = "go-live"
