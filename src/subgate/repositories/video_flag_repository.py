"""
Per-video flag repository.

Flags are persisted in plugin key-value storage under
``video-flags:<uuid>``; the uuid is used because the numeric video id can
change when a video is re-imported.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import PluginStorage
from ..exceptions import FlagStoreError
from ..models.flags import VIDEO_FLAGS_STORAGE_PREFIX, VideoFlags, storage_key
from .base import KeyValueRepository


class VideoFlagRepository(KeyValueRepository[PluginStorage]):
    """Repository for per-video subscriber-only and deny-download flags."""

    def __init__(self, plugin_name: str) -> None:
        super().__init__(PluginStorage, "key", plugin_name)

    async def get_flags(
        self, session: AsyncSession, video_uuid: str
    ) -> Optional[VideoFlags]:
        """
        Get the stored flags for one video.

        Parameters
        ----------
        session : AsyncSession
            Database session
        video_uuid : str
            Stable video identifier

        Returns
        -------
        Optional[VideoFlags]
            Parsed flags, or None if nothing was stored

        Raises
        ------
        FlagStoreError
            If the storage read fails
        """
        try:
            raw = await self.get_value(session, storage_key(video_uuid))
        except SQLAlchemyError as e:
            raise FlagStoreError(
                "Flag read failed", video_id=video_uuid, original_error=e
            ) from e
        return VideoFlags.from_storage(raw)

    async def get_many_flags(
        self, session: AsyncSession, video_uuids: Iterable[str]
    ) -> Dict[str, Optional[VideoFlags]]:
        """
        Get the stored flags for a page of videos in one round trip.

        Every requested uuid is present in the result; videos with no
        stored record map to None.
        """
        uuids = list(dict.fromkeys(video_uuids))
        try:
            raw_values = await self.get_values(
                session, (storage_key(uuid) for uuid in uuids)
            )
        except SQLAlchemyError as e:
            raise FlagStoreError("Batch flag read failed", original_error=e) from e

        prefix_length = len(VIDEO_FLAGS_STORAGE_PREFIX)
        parsed = {
            key[prefix_length:]: VideoFlags.from_storage(value)
            for key, value in raw_values.items()
        }
        return {uuid: parsed.get(uuid) for uuid in uuids}

    async def store_flags(
        self, session: AsyncSession, video_uuid: str, flags: VideoFlags
    ) -> None:
        """Persist canonical flags for a video, replacing any previous record."""
        try:
            await self.store_value(session, storage_key(video_uuid), flags.to_storage())
        except SQLAlchemyError as e:
            raise FlagStoreError(
                "Flag write failed", video_id=video_uuid, original_error=e
            ) from e
