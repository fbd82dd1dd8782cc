"""
Video repository.

Read-only access to host videos for the HTTP surface: paginated listing and
single lookups by uuid, with channel and media collections eagerly loaded.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..db.models import Video as VideoDB
from ..models.video import ChannelRef, VideoRecord


class VideoRepository:
    """Repository for host video rows."""

    async def list_page(
        self, session: AsyncSession, *, limit: int = 25, offset: int = 0
    ) -> Tuple[List[VideoDB], int]:
        """
        Get one page of videos, newest first, plus the unfiltered total.

        Parameters
        ----------
        session : AsyncSession
            Database session
        limit : int
            Page size
        offset : int
            Number of rows to skip

        Returns
        -------
        Tuple[List[VideoDB], int]
            The page of videos and the total row count
        """
        total_result = await session.execute(select(func.count()).select_from(VideoDB))
        total = int(total_result.scalar() or 0)

        result = await session.execute(
            select(VideoDB)
            .options(selectinload(VideoDB.channel))
            .order_by(VideoDB.created_at.desc(), VideoDB.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def get_by_uuid(self, session: AsyncSession, uuid: str) -> Optional[VideoDB]:
        """Get a video with its channel and media collections, or None."""
        result = await session.execute(
            select(VideoDB)
            .options(
                selectinload(VideoDB.channel),
                selectinload(VideoDB.files),
                selectinload(VideoDB.streaming_playlists),
            )
            .where(VideoDB.uuid == uuid)
        )
        return result.scalar_one_or_none()


def to_video_record(video: VideoDB, *, include_media: bool = False) -> VideoRecord:
    """
    Convert a video row to the payload shape the hooks operate on.

    Media collections are only loaded for detail lookups; list rows leave
    them unset.
    """
    record = VideoRecord(
        id=video.id,
        uuid=video.uuid,
        name=video.name,
        channel=ChannelRef(id=video.channel_id, name=video.channel.name),
        download_enabled=video.download_enabled,
    )
    if include_media:
        record = record.model_copy(
            update={
                "files": [
                    {"id": f.id, "resolution": f.resolution, "fileUrl": f.file_url}
                    for f in video.files
                ],
                "streaming_playlists": [
                    {"id": p.id, "playlistUrl": p.playlist_url}
                    for p in video.streaming_playlists
                ],
            }
        )
    return record
