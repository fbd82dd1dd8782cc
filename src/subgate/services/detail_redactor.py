"""
Detail redactor.

Applies the visibility policy to a single video fetch. A denied video is not
turned into an error: the record is returned with every media reference
stripped and a restricted marker set, so the client can render a
"subscribers only" placeholder.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional, Protocol

from pydantic import BaseModel, ConfigDict

from subgate.models.access import AccessDecision
from subgate.models.enums import AccessReason
from subgate.models.flags import (
    PLUGIN_BLOCKED_FLAG,
    VIDEO_FIELD_DENY_DOWNLOAD,
    VIDEO_FIELD_SUBSCRIBER_ONLY,
    EffectiveFlags,
)
from subgate.models.video import VideoRecord
from subgate.services.access_engine import AccessDecisionEngine

logger = logging.getLogger(__name__)

HTTP_403_FORBIDDEN = 403


class StatusCarrier(Protocol):
    """Anything with a writable HTTP status code (e.g. a starlette Response)."""

    status_code: int


class RedactionResult(BaseModel):
    """Outcome of resolving a single video for a requester."""

    video: VideoRecord
    accessible: bool
    decision: AccessDecision

    model_config = ConfigDict(frozen=True)


def annotate_video(video: VideoRecord, flags: EffectiveFlags) -> VideoRecord:
    """Return a copy of ``video`` whose plugin data carries its effective flags."""
    plugin_data = dict(video.plugin_data)
    plugin_data[VIDEO_FIELD_SUBSCRIBER_ONLY] = flags.subscriber_only
    plugin_data[VIDEO_FIELD_DENY_DOWNLOAD] = flags.deny_download
    return video.model_copy(update={"plugin_data": plugin_data})


def redact_video(video: VideoRecord) -> VideoRecord:
    """
    Return a copy of ``video`` that references no playable media.

    Downloads are disabled, every file and playlist collection is emptied
    and the subscriber-only and restricted markers are set. The record
    itself (id, uuid, title, channel) is preserved.
    """
    plugin_data = dict(video.plugin_data)
    plugin_data[VIDEO_FIELD_SUBSCRIBER_ONLY] = True
    plugin_data[PLUGIN_BLOCKED_FLAG] = True

    update: Dict[str, Any] = {
        "download_enabled": False,
        "files": [],
        "streaming_playlists": [],
        "plugin_data": plugin_data,
    }
    # Legacy collections are only emptied when the host sent them
    if video.video_files is not None:
        update["video_files"] = []
    if video.video_streaming_playlists is not None:
        update["video_streaming_playlists"] = []

    return video.model_copy(update=update)


def redact_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Redact a raw video mapping that could not be parsed into a ``VideoRecord``.

    Same guarantees as ``redact_video``: every media collection the payload
    carries is emptied, ``files`` and ``streamingPlaylists`` are always
    present and empty, downloads are disabled and the markers are set.
    """
    redacted = dict(payload)
    for key in ("files", "streamingPlaylists"):
        redacted[key] = []
    for key in ("VideoFiles", "VideoStreamingPlaylists"):
        if key in redacted:
            redacted[key] = []
    redacted["downloadEnabled"] = False

    raw_plugin_data = payload.get("pluginData")
    plugin_data: Dict[str, Any] = (
        dict(raw_plugin_data) if isinstance(raw_plugin_data, Mapping) else {}
    )
    plugin_data[VIDEO_FIELD_SUBSCRIBER_ONLY] = True
    plugin_data[PLUGIN_BLOCKED_FLAG] = True
    redacted["pluginData"] = plugin_data
    return redacted


class DetailRedactor:
    """Resolve a single video fetch to either the full or a redacted record."""

    def __init__(self, engine: AccessDecisionEngine) -> None:
        self._engine = engine

    async def resolve(
        self,
        video: VideoRecord,
        identity: Optional[int],
        response: Optional[StatusCarrier] = None,
    ) -> RedactionResult:
        """
        Annotate, decide, and redact on denial.

        Parameters
        ----------
        video : VideoRecord
            The fetched video.
        identity : Optional[int]
            Requesting user id, or None for an anonymous requester.
        response : Optional[StatusCarrier]
            When given, its status code is set to 403 on denial.

        Returns
        -------
        RedactionResult
            The annotated video with ``accessible=True``, or the redacted
            video with ``accessible=False``.
        """
        policy = self._engine.policy
        try:
            flags = await self._engine.effective_flags(video, policy)
        except Exception:
            logger.error(
                "Failed to read flags for video %s; restricting it",
                video.id,
                exc_info=True,
                extra={"user_id": identity, "video_id": video.id, "video_uuid": video.uuid},
            )
            decision = AccessDecision.deny(AccessReason.LOOKUP_FAILED)
        else:
            video = annotate_video(video, flags)
            decision = await self._engine.check_view(identity, video, policy, flags)

        if decision.allowed:
            return RedactionResult(video=video, accessible=True, decision=decision)

        if response is not None:
            response.status_code = HTTP_403_FORBIDDEN

        logger.debug(
            "Redacting video %s for user %s (%s)", video.uuid, identity, decision.reason.value
        )
        return RedactionResult(
            video=redact_video(video), accessible=False, decision=decision
        )
