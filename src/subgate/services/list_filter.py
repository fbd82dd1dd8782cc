"""
List filter.

Applies the visibility policy across one page of a video listing. The
requester's administrator status and channel memberships are looked up at
most once per page, and the page's stored flags are fetched in one batch,
so the cost of filtering does not grow with a per-item round trip.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from subgate.models.access import ChannelMembership
from subgate.models.policy import PolicyConfig
from subgate.models.video import VideoListResult, VideoRecord
from subgate.services.flag_store import FlagStore
from subgate.services.membership_resolver import MembershipResolver
from subgate.services.policy_config import PolicyConfigProvider

logger = logging.getLogger(__name__)


class ListFilter:
    """
    Drop subscriber-only videos the requester may not see from a list page.

    Order of the kept items is preserved and ``total`` is recomputed to the
    number of items returned.

    Failure handling (fail-closed throughout):

    - administrator lookup fails: the requester is filtered like any user;
    - flag read fails: every item on the page is treated as subscriber-only;
    - membership lookup fails: the page comes back empty.
    """

    def __init__(
        self,
        resolver: MembershipResolver,
        flag_store: FlagStore,
        policy_provider: PolicyConfigProvider,
    ) -> None:
        self._resolver = resolver
        self._flag_store = flag_store
        self._policy_provider = policy_provider

    async def filter(
        self, result: VideoListResult, identity: Optional[int]
    ) -> VideoListResult:
        """
        Filter one page of videos for a requester.

        Parameters
        ----------
        result : VideoListResult
            The page produced by the host query.
        identity : Optional[int]
            Requesting user id, or None for an anonymous requester.

        Returns
        -------
        VideoListResult
            The kept videos, in their original order, with ``total`` equal
            to their count.
        """
        policy = self._policy_provider.current
        videos = list(result.data)

        if identity is not None and await self._is_root_admin(identity):
            return VideoListResult(data=videos, total=len(videos))

        restricted = await self._restricted_map(videos, policy)
        unrestricted = [video for video in videos if not restricted[id(video)]]

        if identity is None or len(unrestricted) == len(videos):
            return VideoListResult(data=unrestricted, total=len(unrestricted))

        try:
            membership = await self._resolver.resolve(identity)
        except Exception:
            logger.error(
                "Failed to load channel access lists for user %s; returning an empty page",
                identity,
                exc_info=True,
                extra={"user_id": identity},
            )
            return VideoListResult(data=[], total=0)

        kept = [
            video
            for video in videos
            if not restricted[id(video)] or self._granted(video, membership)
        ]
        return VideoListResult(data=kept, total=len(kept))

    async def _is_root_admin(self, identity: int) -> bool:
        try:
            return await self._resolver.is_root_admin(identity)
        except Exception:
            logger.warning(
                "Administrator lookup failed for user %s; filtering as a regular user",
                identity,
                exc_info=True,
                extra={"user_id": identity},
            )
            return False

    async def _restricted_map(
        self, videos: List[VideoRecord], policy: PolicyConfig
    ) -> Dict[int, bool]:
        """Map ``id(video)`` to its effective subscriber-only flag, read from the store."""
        if policy.global_subscriber_only:
            return {id(video): True for video in videos}

        to_read = [video.uuid for video in videos if video.uuid]

        try:
            stored = await self._flag_store.get_many(to_read) if to_read else {}
        except Exception:
            logger.error(
                "Failed to read video flags for %d videos; treating the page as restricted",
                len(to_read),
                exc_info=True,
            )
            return {id(video): True for video in videos}

        restricted: Dict[int, bool] = {}
        for video in videos:
            flags = stored.get(video.uuid) if video.uuid else None
            restricted[id(video)] = bool(flags and flags.subscriber_only)
        return restricted

    @staticmethod
    def _granted(video: VideoRecord, membership: ChannelMembership) -> bool:
        return membership.grants(video.resolve_channel_id())
