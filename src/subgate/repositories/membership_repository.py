"""
Membership repository.

Answers the relational questions the access engine needs: is a user the
root administrator, does a user own a video's channel, and which channels
does a user own or follow. Every query is a single round trip.
"""

from __future__ import annotations

from typing import Set

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from ..db.models import Account, Actor, ActorFollow, User, Video, VideoChannel
from ..exceptions import MembershipLookupError
from ..models.enums import UserRole


class MembershipRepository:
    """Repository for administrator, ownership and follow lookups."""

    async def is_root_admin(self, session: AsyncSession, user_id: int) -> bool:
        """
        Check whether a user holds the administrator role.

        Parameters
        ----------
        session : AsyncSession
            Database session
        user_id : int
            User identifier

        Returns
        -------
        bool
            True if the user exists and is an administrator

        Raises
        ------
        MembershipLookupError
            If the query fails
        """
        try:
            result = await session.execute(select(User.role).where(User.id == user_id))
            role = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise MembershipLookupError(
                "Administrator lookup failed", user_id=user_id, original_error=e
            ) from e
        return role == UserRole.ADMINISTRATOR

    async def owns_video(
        self, session: AsyncSession, user_id: int, video_id: int
    ) -> bool:
        """
        Check whether a user owns the channel that published a video.

        Follows the video -> channel -> account -> user chain.

        Parameters
        ----------
        session : AsyncSession
            Database session
        user_id : int
            User identifier
        video_id : int
            Numeric video identifier

        Returns
        -------
        bool
            True if the video's channel belongs to one of the user's accounts
        """
        query = (
            select(func.count())
            .select_from(Video)
            .join(VideoChannel, Video.channel_id == VideoChannel.id)
            .join(Account, VideoChannel.account_id == Account.id)
            .where(Video.id == video_id, Account.user_id == user_id)
        )
        try:
            result = await session.execute(query)
            count = result.scalar()
        except SQLAlchemyError as e:
            raise MembershipLookupError(
                "Ownership lookup failed",
                user_id=user_id,
                video_id=video_id,
                original_error=e,
            ) from e
        return int(count or 0) > 0

    async def owned_channel_ids(self, session: AsyncSession, user_id: int) -> Set[int]:
        """
        Get the ids of every channel owned by the user's accounts.

        Parameters
        ----------
        session : AsyncSession
            Database session
        user_id : int
            User identifier

        Returns
        -------
        Set[int]
            Owned channel ids (empty if none)
        """
        query = (
            select(VideoChannel.id)
            .join(Account, VideoChannel.account_id == Account.id)
            .where(Account.user_id == user_id)
        )
        try:
            result = await session.execute(query)
            return set(result.scalars().all())
        except SQLAlchemyError as e:
            raise MembershipLookupError(
                "Owned channel lookup failed", user_id=user_id, original_error=e
            ) from e

    async def followed_channel_ids(
        self, session: AsyncSession, user_id: int
    ) -> Set[int]:
        """
        Get the ids of every channel the user's accounts follow.

        Joins the follow edge from the follower actor (bound to one of the
        user's accounts) to the target actor, keeping only targets that are
        channels.

        Parameters
        ----------
        session : AsyncSession
            Database session
        user_id : int
            User identifier

        Returns
        -------
        Set[int]
            Followed channel ids (empty if none)
        """
        try:
            result = await session.execute(self._followed_channels_query(user_id))
            return set(result.scalars().all())
        except SQLAlchemyError as e:
            raise MembershipLookupError(
                "Followed channel lookup failed", user_id=user_id, original_error=e
            ) from e

    async def follows_channel(
        self, session: AsyncSession, user_id: int, channel_id: int
    ) -> bool:
        """
        Check whether the user follows one specific channel.

        Parameters
        ----------
        session : AsyncSession
            Database session
        user_id : int
            User identifier
        channel_id : int
            Channel identifier

        Returns
        -------
        bool
            True if a follow edge to the channel exists
        """
        follow_exists = (
            self._followed_channels_query(user_id)
            .where(VideoChannel.id == channel_id)
            .exists()
        )
        try:
            result = await session.execute(select(follow_exists))
            return bool(result.scalar())
        except SQLAlchemyError as e:
            raise MembershipLookupError(
                "Follow lookup failed", user_id=user_id, original_error=e
            ) from e

    @staticmethod
    def _followed_channels_query(user_id: int) -> Select[tuple[int]]:
        follower = aliased(Actor)
        target = aliased(Actor)
        return (
            select(VideoChannel.id)
            .select_from(ActorFollow)
            .join(follower, follower.id == ActorFollow.actor_id)
            .join(Account, Account.id == follower.account_id)
            .join(target, target.id == ActorFollow.target_actor_id)
            .join(VideoChannel, VideoChannel.id == target.video_channel_id)
            .where(Account.user_id == user_id)
        )
