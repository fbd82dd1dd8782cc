"""
Access decision models.

Defines the results produced by the access engine and the per-request
channel membership snapshot used by list filtering.
"""

from __future__ import annotations

from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import AccessReason

DOWNLOADS_DISABLED_MESSAGE = "Downloads are disabled for this video."
SUBSCRIBERS_ONLY_MESSAGE = "This video is restricted to channel subscribers."


class AccessDecision(BaseModel):
    """Outcome of a visibility check."""

    allowed: bool = Field(..., description="True when the video may be viewed")
    reason: AccessReason = Field(..., description="Why the decision was made")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def allow(cls, reason: AccessReason = AccessReason.OK) -> "AccessDecision":
        """Build an allowing decision."""
        return cls(allowed=True, reason=reason)

    @classmethod
    def deny(cls, reason: AccessReason) -> "AccessDecision":
        """Build a denying decision."""
        return cls(allowed=False, reason=reason)


class DownloadPermission(BaseModel):
    """
    Result of the download-permission filter.

    Serializes to the host's ``{allowed, errorMessage}`` shape.
    """

    allowed: bool
    error_message: Optional[str] = Field(
        default=None, serialization_alias="errorMessage"
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def denied(cls, message: str) -> "DownloadPermission":
        """Build a denial carrying a user-facing message."""
        return cls(allowed=False, error_message=message)

    def to_hook_result(self) -> dict[str, object]:
        """Return the mapping handed back to the host."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ChannelMembership(BaseModel):
    """Channels a requester owns or follows, computed once per list request."""

    owned: FrozenSet[int] = frozenset()
    followed: FrozenSet[int] = frozenset()

    model_config = ConfigDict(frozen=True)

    def grants(self, channel_id: Optional[int]) -> bool:
        """True when the channel is owned or followed; unknown channels never match."""
        if channel_id is None:
            return False
        return channel_id in self.owned or channel_id in self.followed
