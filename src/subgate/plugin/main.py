"""
Plugin entry point.

``register`` builds the services, loads the policy snapshot and attaches
the hook handlers; the returned ``SubscriberGatePlugin`` handle owns them
until ``unregister`` is called.

Handlers accept the host's payloads as plain mappings (or already parsed
models) and hand back the same shape they were given.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subgate.config.settings import Settings, get_settings
from subgate.models.access import SUBSCRIBERS_ONLY_MESSAGE, DownloadPermission
from subgate.models.video import VideoListResult, VideoRecord
from subgate.plugin.hooks import (
    DOWNLOAD_HOOKS,
    LIST_HOOKS,
    VIDEO_GET,
    VIDEO_UPDATED,
    HookRegistry,
    RegisteredHook,
)
from subgate.plugin.settings import SETTING_DEFINITIONS
from subgate.plugin.video_fields import build_video_fields
from subgate.repositories.membership_repository import MembershipRepository
from subgate.repositories.video_flag_repository import VideoFlagRepository
from subgate.services.access_engine import AccessDecisionEngine
from subgate.services.detail_redactor import (
    HTTP_403_FORBIDDEN,
    DetailRedactor,
    redact_payload,
)
from subgate.services.flag_store import FlagStore
from subgate.services.flag_writeback import FlagWriteback
from subgate.services.interfaces import SettingsManagerInterface
from subgate.services.list_filter import ListFilter
from subgate.services.membership_resolver import MembershipResolver
from subgate.services.policy_config import PolicyConfigProvider

logger = logging.getLogger(__name__)


def identity_from_params(params: Mapping[str, Any] | None) -> Optional[int]:
    """
    Extract the requesting user id from hook parameters.

    ``userId`` is read first, then ``user.id`` (mapping or object). Anything
    that is not a positive integer is treated as anonymous.
    """
    if not params:
        return None

    user_id = params.get("userId")
    if user_id is None:
        user = params.get("user")
        if isinstance(user, Mapping):
            user_id = user.get("id")
        elif user is not None:
            user_id = getattr(user, "id", None)

    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        return None
    return user_id


def _response_from_params(params: Mapping[str, Any]) -> Any:
    response = params.get("response")
    if response is not None:
        return response
    request = params.get("req")
    return getattr(request, "res", None)


class SubscriberGatePlugin:
    """
    Registered plugin instance.

    Attributes
    ----------
    engine : AccessDecisionEngine
        Visibility and download decisions.
    list_filter : ListFilter
        List page filtering.
    redactor : DetailRedactor
        Single video resolution.
    writeback : FlagWriteback
        Flag persistence on video update.
    policy_provider : PolicyConfigProvider
        Current policy snapshot.
    flag_store : FlagStore
        Per-video flag storage.
    """

    def __init__(
        self,
        registry: HookRegistry,
        settings_manager: SettingsManagerInterface,
        flag_store: FlagStore,
        resolver: MembershipResolver,
        policy_provider: PolicyConfigProvider,
    ) -> None:
        self.registry = registry
        self.settings_manager = settings_manager
        self.flag_store = flag_store
        self.resolver = resolver
        self.policy_provider = policy_provider
        self.engine = AccessDecisionEngine(resolver, flag_store, policy_provider)
        self.list_filter = ListFilter(resolver, flag_store, policy_provider)
        self.redactor = DetailRedactor(self.engine)
        self.writeback = FlagWriteback(flag_store, policy_provider)
        self._hooks: List[RegisteredHook] = []

    @property
    def registered(self) -> bool:
        return bool(self._hooks)

    def attach(self) -> None:
        """Attach every handler to the registry."""
        for target in LIST_HOOKS:
            self._hooks.append(self.registry.register_hook(target, self.filter_list_result))
        self._hooks.append(self.registry.register_hook(VIDEO_GET, self.filter_video_get))
        for target in DOWNLOAD_HOOKS:
            self._hooks.append(self.registry.register_hook(target, self.filter_download))
        self._hooks.append(self.registry.register_hook(VIDEO_UPDATED, self.on_video_updated))

    def unregister(self) -> None:
        """Detach every handler this plugin attached."""
        for hook in self._hooks:
            self.registry.unregister_hook(hook)
        self._hooks = []
        logger.info("Unregistered subscriber gate hooks")

    async def filter_list_result(self, result: Any, params: Mapping[str, Any]) -> Any:
        """List hook: drop videos the requester may not see."""
        if isinstance(result, VideoListResult):
            return await self.list_filter.filter(result, identity_from_params(params))

        if not isinstance(result, Mapping) or not isinstance(result.get("data"), list):
            return result

        identity = identity_from_params(params)
        records: List[VideoRecord] = []
        for item in result["data"]:
            try:
                records.append(VideoRecord.model_validate(item))
            except ValidationError:
                logger.error(
                    "Dropping unreadable video from list result",
                    exc_info=True,
                    extra={"user_id": identity},
                )

        page = VideoListResult(data=records, total=len(records))
        filtered = await self.list_filter.filter(page, identity)
        return {**result, **filtered.to_response()}

    async def filter_video_get(self, video: Any, params: Mapping[str, Any]) -> Any:
        """Video-get hook: return the full video or its redacted form."""
        if video is None:
            return video

        identity = identity_from_params(params)
        response = _response_from_params(params)
        if isinstance(video, VideoRecord):
            record = video
        else:
            try:
                record = VideoRecord.model_validate(video)
            except ValidationError:
                logger.error(
                    "Unreadable video in get result; redacting it",
                    exc_info=True,
                    extra={"user_id": identity},
                )
                if response is not None:
                    response.status_code = HTTP_403_FORBIDDEN
                return redact_payload(video) if isinstance(video, Mapping) else None

        resolution = await self.redactor.resolve(record, identity, response)
        if isinstance(video, VideoRecord):
            return resolution.video
        return resolution.video.to_response()

    async def filter_download(self, result: Any, params: Mapping[str, Any]) -> Any:
        """Download hooks: narrow an allowed download, never widen a refusal."""
        if not isinstance(result, Mapping) or not result.get("allowed"):
            return result

        video = params.get("video")
        if video is None:
            return result
        if not isinstance(video, VideoRecord):
            try:
                video = VideoRecord.model_validate(video)
            except ValidationError:
                logger.error("Unreadable video in download check; refusing", exc_info=True)
                return DownloadPermission.denied(SUBSCRIBERS_ONLY_MESSAGE).to_hook_result()

        permission = await self.engine.can_download(identity_from_params(params), video)
        if permission.allowed:
            return result
        return permission.to_hook_result()

    async def on_video_updated(self, params: Mapping[str, Any]) -> None:
        """Update action: persist the submitted per-video flags."""
        video = params.get("video")
        if video is not None and not isinstance(video, VideoRecord):
            try:
                video = VideoRecord.model_validate(video)
            except ValidationError:
                logger.error("Unreadable video in update notification", exc_info=True)
                return
        await self.writeback.on_video_updated(params.get("body"), video)

    async def video_fields(self) -> List[Dict[str, Any]]:
        """Per-video form field descriptors for the current settings."""
        names = [definition.name for definition in SETTING_DEFINITIONS]
        return build_video_fields(await self.settings_manager.get_settings(names))


async def register(
    registry: HookRegistry,
    settings_manager: SettingsManagerInterface,
    session_factory: async_sessionmaker[AsyncSession],
    app_settings: Settings | None = None,
) -> SubscriberGatePlugin:
    """
    Register subgate with a host.

    Parameters
    ----------
    registry : HookRegistry
        Where the hook handlers are attached.
    settings_manager : SettingsManagerInterface
        Source of the plugin settings; the policy snapshot is loaded from it
        once here and refreshed on every change notification.
    session_factory : async_sessionmaker[AsyncSession]
        Factory for the sessions used by membership and flag lookups.
    app_settings : Settings | None
        Application settings; defaults to the environment-derived settings.

    Returns
    -------
    SubscriberGatePlugin
        Handle owning the registered handlers.
    """
    app_settings = app_settings or get_settings()

    flag_store = FlagStore(
        session_factory,
        VideoFlagRepository(app_settings.plugin_name),
        max_concurrency=app_settings.flag_lookup_concurrency,
        batch_reads=app_settings.batch_flag_reads,
    )
    resolver = MembershipResolver(session_factory, MembershipRepository())
    policy_provider = PolicyConfigProvider()

    await policy_provider.load(settings_manager)
    policy_provider.subscribe(settings_manager)

    plugin = SubscriberGatePlugin(
        registry, settings_manager, flag_store, resolver, policy_provider
    )
    plugin.attach()

    policy = policy_provider.current
    logger.info(
        "Registered subscriber gate (global_subscriber_only=%s, global_deny_download=%s)",
        policy.global_subscriber_only,
        policy.global_deny_download,
    )
    return plugin


async def unregister(plugin: SubscriberGatePlugin) -> None:
    """Remove every handler the plugin registered."""
    plugin.unregister()


__all__ = [
    "SubscriberGatePlugin",
    "identity_from_params",
    "register",
    "unregister",
]
