"""
Host hook targets and the hook registry.

Filter hooks receive the host's result and the request parameters and
return a (possibly replaced) result; action hooks are notified after an
operation completed and their return value is ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Dict, List

from subgate.exceptions import HookRegistrationError

logger = logging.getLogger(__name__)

# List result filters
VIDEOS_LIST = "filter:api.videos.list.result"
CHANNEL_VIDEOS_LIST = "filter:api.video-channels.videos.list.result"
ACCOUNT_VIDEOS_LIST = "filter:api.accounts.videos.list.result"
LOCAL_SEARCH_VIDEOS_LIST = "filter:api.search.videos.local.list.result"
INDEX_SEARCH_VIDEOS_LIST = "filter:api.search.videos.index.list.result"
PLAYLIST_VIDEOS_LIST = "filter:api.video-playlist.videos.list.result"
OVERVIEW_VIDEOS_LIST = "filter:api.overviews.videos.list.result"
SUBSCRIPTION_VIDEOS_LIST = "filter:api.user.me.subscription-videos.list.result"

# Single video fetch
VIDEO_GET = "filter:api.video.get.result"

# Download permission filters
VIDEO_DOWNLOAD_ALLOWED = "filter:api.download.video.allowed.result"
GENERATED_VIDEO_DOWNLOAD_ALLOWED = "filter:api.download.generated-video.allowed.result"

# Video update notification
VIDEO_UPDATED = "action:api.video.updated"

LIST_HOOKS = (
    VIDEOS_LIST,
    CHANNEL_VIDEOS_LIST,
    ACCOUNT_VIDEOS_LIST,
    LOCAL_SEARCH_VIDEOS_LIST,
    INDEX_SEARCH_VIDEOS_LIST,
    PLAYLIST_VIDEOS_LIST,
    OVERVIEW_VIDEOS_LIST,
    SUBSCRIPTION_VIDEOS_LIST,
)

DOWNLOAD_HOOKS = (VIDEO_DOWNLOAD_ALLOWED, GENERATED_VIDEO_DOWNLOAD_ALLOWED)

FILTER_HOOKS = frozenset([*LIST_HOOKS, VIDEO_GET, *DOWNLOAD_HOOKS])
ACTION_HOOKS = frozenset([VIDEO_UPDATED])
VALID_HOOKS = FILTER_HOOKS | ACTION_HOOKS

HookHandler = Callable[..., Awaitable[Any]]


@dataclass(eq=False)
class RegisteredHook:
    """A handler attached to one hook target."""

    target: str
    handler: HookHandler
    priority: int = 0
    order: int = 0


class HookRegistry:
    """
    In-process registry of hook handlers, keyed by target.

    Handlers for a target run by descending priority, then in registration
    order. A filter handler's return value becomes the next handler's input.
    """

    def __init__(self) -> None:
        self._hooks: Dict[str, List[RegisteredHook]] = {}
        self._counter = 0

    def register_hook(self, target: str, handler: HookHandler, priority: int = 0) -> RegisteredHook:
        """
        Attach a handler to a hook target.

        Raises
        ------
        HookRegistrationError
            If the target is not a known hook.
        """
        if target not in VALID_HOOKS:
            raise HookRegistrationError(target)

        self._counter += 1
        hook = RegisteredHook(target=target, handler=handler, priority=priority, order=self._counter)
        hooks = self._hooks.setdefault(target, [])
        hooks.append(hook)
        hooks.sort(key=lambda h: (-h.priority, h.order))
        logger.debug("Registered hook handler for %s", target)
        return hook

    def unregister_hook(self, hook: RegisteredHook) -> bool:
        """Detach a previously registered handler; False if it was not attached."""
        hooks = self._hooks.get(hook.target, [])
        if hook not in hooks:
            return False
        hooks.remove(hook)
        return True

    def handlers(self, target: str) -> List[HookHandler]:
        """Handlers attached to a target, in run order."""
        return [hook.handler for hook in self._hooks.get(target, [])]

    def has_handlers(self, target: str) -> bool:
        return bool(self._hooks.get(target))

    async def run_filter(
        self, target: str, result: Any, params: Mapping[str, Any] | None = None
    ) -> Any:
        """
        Pass ``result`` through every handler attached to a filter target.

        Parameters
        ----------
        target : str
            A filter hook target.
        result : Any
            The host's result.
        params : Mapping[str, Any] | None
            Request parameters handed to each handler.

        Returns
        -------
        Any
            The result returned by the last handler, or ``result`` unchanged
            when nothing is attached.
        """
        if target not in FILTER_HOOKS:
            raise HookRegistrationError(target)
        params = params or {}
        for handler in self.handlers(target):
            result = await handler(result, params)
        return result

    async def run_action(self, target: str, params: Mapping[str, Any] | None = None) -> None:
        """Notify every handler attached to an action target."""
        if target not in ACTION_HOOKS:
            raise HookRegistrationError(target)
        params = params or {}
        for handler in self.handlers(target):
            await handler(params)
