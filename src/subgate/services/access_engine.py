"""
Access decision engine.

Implements the two policies subgate enforces:

- visibility: a subscriber-only video is visible to the root administrator,
  to the owner of its channel and to followers of its channel, and to
  nobody else;
- download: a deny-download video is never downloadable, and otherwise a
  download is allowed only when the video is visible.

Lookups are ordered cheapest and most decisive first (administrator, then
ownership, then one targeted follow query) and stop at the first bypass.
Every public method fails closed: a lookup error is logged with the
requester and video identifiers and turns into a denial.
"""

from __future__ import annotations

import logging
from typing import Optional

from subgate.models.access import (
    DOWNLOADS_DISABLED_MESSAGE,
    SUBSCRIBERS_ONLY_MESSAGE,
    AccessDecision,
    DownloadPermission,
)
from subgate.models.enums import AccessReason
from subgate.models.flags import EffectiveFlags
from subgate.models.policy import PolicyConfig
from subgate.models.video import VideoRecord
from subgate.services.flag_store import FlagStore
from subgate.services.membership_resolver import MembershipResolver
from subgate.services.policy_config import PolicyConfigProvider

logger = logging.getLogger(__name__)


class AccessDecisionEngine:
    """
    Decide view and download rights for a (video, identity) pair.

    Parameters
    ----------
    resolver : MembershipResolver
        Administrator, ownership and follow lookups.
    flag_store : FlagStore
        Stored per-video flags.
    policy_provider : PolicyConfigProvider
        Source of the current policy snapshot.
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

    @property
    def policy(self) -> PolicyConfig:
        """Current policy snapshot."""
        return self._policy_provider.current

    async def effective_flags(
        self, video: VideoRecord, policy: Optional[PolicyConfig] = None
    ) -> EffectiveFlags:
        """
        Compute the flags enforced for a video.

        The store is the only source of per-video flags; annotations already
        present on the record are ignored. The store is not read at all when
        both global overrides are on. Raises ``FlagStoreError`` if a needed
        read fails.
        """
        policy = policy or self.policy
        if policy.global_subscriber_only and policy.global_deny_download:
            return EffectiveFlags(subscriber_only=True, deny_download=True)

        stored = await self._flag_store.get(video.uuid) if video.uuid else None
        return EffectiveFlags.resolve(policy, stored)

    async def check_view(
        self,
        identity: Optional[int],
        video: VideoRecord,
        policy: Optional[PolicyConfig] = None,
        flags: Optional[EffectiveFlags] = None,
    ) -> AccessDecision:
        """
        Decide whether ``identity`` (None for anonymous) may view ``video``.

        Parameters
        ----------
        identity : Optional[int]
            Requesting user id, or None for an anonymous requester.
        video : VideoRecord
            The video being accessed.
        policy : Optional[PolicyConfig]
            Snapshot to decide against; defaults to the current one.
        flags : Optional[EffectiveFlags]
            Flags already resolved for this video under ``policy``; read
            from the store when omitted.

        Returns
        -------
        AccessDecision
            Always a definite decision; lookup failures yield
            ``LOOKUP_FAILED`` denials.
        """
        policy = policy or self.policy
        try:
            if policy.global_subscriber_only:
                subscriber_only = True
            elif flags is not None:
                subscriber_only = flags.subscriber_only
            else:
                subscriber_only = (await self.effective_flags(video, policy)).subscriber_only
            return await self._decide_view(identity, video, subscriber_only)
        except Exception:
            logger.error(
                "Failed to check subscriber-only access for user %s on video %s",
                identity,
                video.id,
                exc_info=True,
                extra={"user_id": identity, "video_id": video.id, "video_uuid": video.uuid},
            )
            return AccessDecision.deny(AccessReason.LOOKUP_FAILED)

    async def can_view(
        self,
        identity: Optional[int],
        video: VideoRecord,
        policy: Optional[PolicyConfig] = None,
    ) -> bool:
        """Boolean form of ``check_view``."""
        return (await self.check_view(identity, video, policy)).allowed

    async def can_download(
        self,
        identity: Optional[int],
        video: VideoRecord,
        policy: Optional[PolicyConfig] = None,
    ) -> DownloadPermission:
        """
        Decide whether ``identity`` may download ``video``.

        Deny-download is absolute and is checked before visibility, so even
        the channel owner is refused. This only narrows what the host already
        allows; callers must not consult it when the host has refused.

        Returns
        -------
        DownloadPermission
            ``allowed=True``, or a denial with a user-facing message.
        """
        policy = policy or self.policy
        try:
            flags = await self.effective_flags(video, policy)
            if flags.deny_download:
                return DownloadPermission.denied(DOWNLOADS_DISABLED_MESSAGE)

            decision = await self._decide_view(identity, video, flags.subscriber_only)
            if decision.allowed:
                return DownloadPermission(allowed=True)
        except Exception:
            logger.error(
                "Failed to check download access for user %s on video %s",
                identity,
                video.id,
                exc_info=True,
                extra={"user_id": identity, "video_id": video.id, "video_uuid": video.uuid},
            )

        return DownloadPermission.denied(SUBSCRIBERS_ONLY_MESSAGE)

    async def _decide_view(
        self, identity: Optional[int], video: VideoRecord, subscriber_only: bool
    ) -> AccessDecision:
        if not subscriber_only:
            return AccessDecision.allow()
        if identity is None:
            return AccessDecision.deny(AccessReason.NOT_AUTHENTICATED)

        if await self._resolver.is_root_admin(identity):
            return AccessDecision.allow(AccessReason.ADMIN_BYPASS)

        video_id = video.id
        channel_id = video.resolve_channel_id()
        if video_id is None or channel_id is None:
            return AccessDecision.deny(AccessReason.NOT_SUBSCRIBED)

        if await self._resolver.owns_video(identity, video_id):
            return AccessDecision.allow(AccessReason.OWNER_BYPASS)

        if await self._resolver.follows_channel(identity, channel_id):
            return AccessDecision.allow(AccessReason.FOLLOWER_BYPASS)

        return AccessDecision.deny(AccessReason.NOT_SUBSCRIBED)
