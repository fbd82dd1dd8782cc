"""
Membership resolver.

Runs the membership queries, each on its own session so that independent
lookups can be awaited concurrently (an ``AsyncSession`` must not be shared
between concurrent operations).
"""

from __future__ import annotations

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subgate.models.access import ChannelMembership
from subgate.repositories.membership_repository import MembershipRepository


class MembershipResolver:
    """
    Answer administrator, ownership and follow questions for a user.

    Every method raises ``MembershipLookupError`` on failure; deciding what a
    failure means is left to the caller.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository: MembershipRepository,
    ) -> None:
        self._session_factory = session_factory
        self._repository = repository

    async def is_root_admin(self, user_id: int) -> bool:
        """True if the user is the root administrator."""
        async with self._session_factory() as session:
            return await self._repository.is_root_admin(session, user_id)

    async def owns_video(self, user_id: int, video_id: int) -> bool:
        """True if the user owns the video's channel."""
        async with self._session_factory() as session:
            return await self._repository.owns_video(session, user_id, video_id)

    async def follows_channel(self, user_id: int, channel_id: int) -> bool:
        """True if the user follows the channel."""
        async with self._session_factory() as session:
            return await self._repository.follows_channel(session, user_id, channel_id)

    async def owned_channel_ids(self, user_id: int) -> set[int]:
        async with self._session_factory() as session:
            return await self._repository.owned_channel_ids(session, user_id)

    async def followed_channel_ids(self, user_id: int) -> set[int]:
        async with self._session_factory() as session:
            return await self._repository.followed_channel_ids(session, user_id)

    async def resolve(self, user_id: int) -> ChannelMembership:
        """
        Compute the owned and followed channel sets for a user.

        The two queries are independent and are issued concurrently.

        Parameters
        ----------
        user_id : int
            User identifier.

        Returns
        -------
        ChannelMembership
            Owned and followed channel ids.
        """
        owned, followed = await asyncio.gather(
            self.owned_channel_ids(user_id),
            self.followed_channel_ids(user_id),
        )
        return ChannelMembership(owned=frozenset(owned), followed=frozenset(followed))
