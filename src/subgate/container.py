"""
Dependency Injection Container for subgate.

Centralizes construction of the repositories, the settings manager, the
hook registry and the registered plugin, so the API and CLI layers share
one wiring and tests can swap pieces out.

Usage
-----
    >>> from subgate.container import container
    >>> video_repo = container.create_video_repository()
    >>> plugin = await container.get_plugin()

Design Principles
-----------------
- Repository factories return new instances each call (transient)
- Service singletons are cached via @cached_property (lazy initialization)
- The plugin is registered once, on first request, behind a lock
- Container can be reset for testing isolation
"""

from __future__ import annotations

import asyncio
import logging
from functools import cached_property
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subgate.config.database import DatabaseManager, db_manager
from subgate.config.settings import Settings, get_settings
from subgate.plugin.hooks import HookRegistry
from subgate.plugin.main import SubscriberGatePlugin, register
from subgate.plugin.settings import SETTING_DEFINITIONS
from subgate.repositories import (
    MembershipRepository,
    PluginSettingRepository,
    VideoFlagRepository,
    VideoRepository,
)
from subgate.services.flag_store import FlagStore
from subgate.services.settings_manager import DatabaseSettingsManager

logger = logging.getLogger(__name__)


class Container:
    """
    Dependency injection container for subgate.

    Parameters
    ----------
    app_settings : Optional[Settings]
        Application settings; defaults to the environment-derived settings.
    database : Optional[DatabaseManager]
        Database manager; defaults to the global one.
    """

    def __init__(
        self,
        app_settings: Optional[Settings] = None,
        database: Optional[DatabaseManager] = None,
    ) -> None:
        self._app_settings = app_settings
        self._database = database
        self._plugin: Optional[SubscriberGatePlugin] = None
        self._plugin_lock = asyncio.Lock()

    @property
    def app_settings(self) -> Settings:
        return self._app_settings or get_settings()

    @property
    def database(self) -> DatabaseManager:
        return self._database or db_manager

    # -------------------------------------------------------------------------
    # Repository Factory Methods (Transient - new instance per call)
    # -------------------------------------------------------------------------

    def create_video_repository(self) -> VideoRepository:
        """Create a new VideoRepository instance."""
        return VideoRepository()

    def create_membership_repository(self) -> MembershipRepository:
        """Create a new MembershipRepository instance."""
        return MembershipRepository()

    def create_video_flag_repository(self) -> VideoFlagRepository:
        """Create a VideoFlagRepository scoped to the configured plugin namespace."""
        return VideoFlagRepository(self.app_settings.plugin_name)

    def create_plugin_setting_repository(self) -> PluginSettingRepository:
        """Create a PluginSettingRepository scoped to the configured plugin namespace."""
        return PluginSettingRepository(self.app_settings.plugin_name)

    def create_flag_store(self) -> FlagStore:
        """Create a FlagStore wired to the shared session factory."""
        return FlagStore(
            self.session_factory,
            self.create_video_flag_repository(),
            max_concurrency=self.app_settings.flag_lookup_concurrency,
            batch_reads=self.app_settings.batch_flag_reads,
        )

    # -------------------------------------------------------------------------
    # Singleton Service Properties (Cached - same instance on repeated access)
    # -------------------------------------------------------------------------

    @cached_property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """The shared async session factory."""
        return self.database.get_session_factory()

    @cached_property
    def hook_registry(self) -> HookRegistry:
        """The singleton HookRegistry instance."""
        return HookRegistry()

    @cached_property
    def settings_manager(self) -> DatabaseSettingsManager:
        """The singleton DatabaseSettingsManager instance."""
        return DatabaseSettingsManager(
            self.session_factory,
            self.create_plugin_setting_repository(),
            SETTING_DEFINITIONS,
        )

    async def get_plugin(self) -> SubscriberGatePlugin:
        """
        Get the registered plugin, registering it on first use.

        Returns
        -------
        SubscriberGatePlugin
            The same handle on every call until ``reset``.
        """
        if self._plugin is not None:
            return self._plugin

        async with self._plugin_lock:
            if self._plugin is None:
                self._plugin = await register(
                    self.hook_registry,
                    self.settings_manager,
                    self.session_factory,
                    self.app_settings,
                )
        return self._plugin

    # -------------------------------------------------------------------------
    # Testing Support
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """
        Reset the container by clearing all cached singleton instances.

        The registered plugin, if any, is detached from the registry first.
        """
        if self._plugin is not None:
            self._plugin.unregister()
            self._plugin = None

        properties_to_clear = ["session_factory", "hook_registry", "settings_manager"]
        for prop in properties_to_clear:
            self.__dict__.pop(prop, None)


# Global container instance
container = Container()
