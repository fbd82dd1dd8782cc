"""
Repository layer for data access patterns.

This module provides repository implementations following the Repository
pattern for clean separation of access logic and data persistence.
"""

from .base import KeyValueRepository
from .membership_repository import MembershipRepository
from .plugin_setting_repository import PluginSettingRepository
from .video_flag_repository import VideoFlagRepository
from .video_repository import VideoRepository

__all__ = [
    "KeyValueRepository",
    "MembershipRepository",
    "PluginSettingRepository",
    "VideoFlagRepository",
    "VideoRepository",
]
