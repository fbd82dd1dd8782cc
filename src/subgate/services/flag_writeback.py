"""
Flag writeback.

Observes video updates and persists the subscriber-only / deny-download
fields submitted with them. Best effort: a failed write is logged and the
update it rode along with is unaffected.
"""

from __future__ import annotations

import logging
from typing import Any

from subgate.models.flags import extract_flags_from_body
from subgate.models.video import VideoRecord
from subgate.services.flag_store import FlagStore
from subgate.services.policy_config import PolicyConfigProvider

logger = logging.getLogger(__name__)


class FlagWriteback:
    """Persist per-video flags from a video update payload."""

    def __init__(self, flag_store: FlagStore, policy_provider: PolicyConfigProvider) -> None:
        self._flag_store = flag_store
        self._policy_provider = policy_provider

    async def on_video_updated(self, body: Any, video: VideoRecord | None) -> bool:
        """
        Handle a completed video update.

        Nothing is written while a global override is active, since the
        per-video values would be ignored anyway.

        Parameters
        ----------
        body : Any
            The update request body.
        video : VideoRecord | None
            The updated video.

        Returns
        -------
        bool
            True if flags were persisted.
        """
        if self._policy_provider.current.has_override:
            logger.debug("Global override active; skipping flag writeback")
            return False

        flags = extract_flags_from_body(body)
        if flags is None or video is None or not video.uuid:
            return False

        try:
            await self._flag_store.set(video.uuid, flags)
        except Exception:
            logger.error(
                "Failed to store plugin video flags for video %s",
                video.id,
                exc_info=True,
                extra={"video_id": video.id, "video_uuid": video.uuid},
            )
            return False
        return True
