"""
Video payload models.

The host hands subgate loosely shaped video records: list items, full
detail records and ORM-backed objects expose the channel under different
keys, and only some of them carry media collections. ``VideoRecord`` keeps
every unknown field (``extra="allow"``) so a filtered or redacted record
round-trips back to the host without losing anything, while the fields the
engine reads are declared with explicit defaults.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChannelRef(BaseModel):
    """Channel reference embedded in a video record."""

    id: Optional[int] = None
    name: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class VideoRecord(BaseModel):
    """Video record as exchanged with the host."""

    id: Optional[int] = Field(default=None, description="Numeric (mutable) id")
    uuid: Optional[str] = Field(default=None, description="Stable identifier")
    name: Optional[str] = Field(default=None, description="Video title")

    # Channel, under whichever key the host used
    channel: Optional[ChannelRef] = None
    channel_id: Optional[int] = Field(default=None, alias="channelId")
    video_channel: Optional[ChannelRef] = Field(default=None, alias="videoChannel")

    download_enabled: bool = Field(default=True, alias="downloadEnabled")

    # Media collections
    files: Optional[List[Dict[str, Any]]] = None
    streaming_playlists: Optional[List[Dict[str, Any]]] = Field(
        default=None, alias="streamingPlaylists"
    )
    video_files: Optional[List[Dict[str, Any]]] = Field(default=None, alias="VideoFiles")
    video_streaming_playlists: Optional[List[Dict[str, Any]]] = Field(
        default=None, alias="VideoStreamingPlaylists"
    )

    plugin_data: Dict[str, Any] = Field(default_factory=dict, alias="pluginData")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("plugin_data", mode="before")
    @classmethod
    def validate_plugin_data(cls, v: Any) -> Any:
        """A null plugin data container is an empty one."""
        return {} if v is None else v

    @field_validator("download_enabled", mode="before")
    @classmethod
    def validate_download_enabled(cls, v: Any) -> Any:
        """A null flag means the host default (downloads enabled)."""
        return True if v is None else v

    def resolve_channel_id(self) -> Optional[int]:
        """Return the channel id from ``channel``, ``channelId`` or ``videoChannel``."""
        if self.channel is not None and self.channel.id is not None:
            return self.channel.id
        if self.channel_id is not None:
            return self.channel_id
        if self.video_channel is not None:
            return self.video_channel.id
        return None

    def has_media(self) -> bool:
        """True if any media collection still references a file or playlist."""
        return any(
            bool(collection)
            for collection in (
                self.files,
                self.streaming_playlists,
                self.video_files,
                self.video_streaming_playlists,
            )
        )

    def to_response(self) -> Dict[str, Any]:
        """
        Serialize back to the host's camelCase shape.

        Only fields the host sent, or that annotation and redaction set, are
        emitted; null values are kept as they came in.
        """
        return self.model_dump(by_alias=True, exclude_unset=True)


class VideoListResult(BaseModel):
    """Paginated list result; ``total`` must equal ``len(data)`` after filtering."""

    data: List[VideoRecord] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)

    def to_response(self) -> Dict[str, Any]:
        """Serialize back to the host's ``{data, total}`` shape."""
        return {
            "data": [video.to_response() for video in self.data],
            "total": self.total,
        }
