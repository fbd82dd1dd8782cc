"""
Per-video flag store.

Wraps ``VideoFlagRepository`` with session management so callers only deal
in video uuids. Page-sized reads go out as a single ``IN`` query; when
batching is disabled the per-video reads are issued concurrently, bounded
by a semaphore so that a large page cannot exhaust the connection pool.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subgate.models.flags import VideoFlags
from subgate.repositories.video_flag_repository import VideoFlagRepository

logger = logging.getLogger(__name__)


class FlagStore:
    """
    Read and persist subscriber-only / deny-download flags by video uuid.

    Parameters
    ----------
    session_factory : async_sessionmaker[AsyncSession]
        Factory producing one session per storage round trip.
    repository : VideoFlagRepository
        Storage access for the plugin namespace.
    max_concurrency : int
        Upper bound on concurrent per-video reads when not batching.
    batch_reads : bool
        Read a whole page of flags in one query (default True).
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository: VideoFlagRepository,
        *,
        max_concurrency: int = 10,
        batch_reads: bool = True,
    ) -> None:
        self._session_factory = session_factory
        self._repository = repository
        self._max_concurrency = max_concurrency
        self._batch_reads = batch_reads

    async def get(self, video_uuid: str) -> Optional[VideoFlags]:
        """Get the stored flags for a video, or None when nothing was stored."""
        async with self._session_factory() as session:
            return await self._repository.get_flags(session, video_uuid)

    async def get_many(self, video_uuids: Iterable[str]) -> Dict[str, Optional[VideoFlags]]:
        """
        Get the stored flags for many videos.

        Parameters
        ----------
        video_uuids : Iterable[str]
            Video uuids; duplicates are collapsed.

        Returns
        -------
        Dict[str, Optional[VideoFlags]]
            Every requested uuid mapped to its flags (None if unset).

        Raises
        ------
        FlagStoreError
            If any read fails.
        """
        uuids = list(dict.fromkeys(video_uuids))
        if not uuids:
            return {}

        if self._batch_reads:
            async with self._session_factory() as session:
                return await self._repository.get_many_flags(session, uuids)

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def read_one(uuid: str) -> Optional[VideoFlags]:
            async with semaphore:
                return await self.get(uuid)

        results = await asyncio.gather(*(read_one(uuid) for uuid in uuids))
        return dict(zip(uuids, results))

    async def set(self, video_uuid: str, flags: VideoFlags) -> None:
        """Persist flags for a video, committing immediately."""
        async with self._session_factory() as session:
            await self._repository.store_flags(session, video_uuid, flags)
            await session.commit()
        logger.debug(
            "Stored video flags for %s: subscriber_only=%s deny_download=%s",
            video_uuid,
            flags.subscriber_only,
            flags.deny_download,
        )
