"""
Pytest configuration and fixtures for subgate tests.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from subgate.config.settings import Settings
from subgate.db.models import Base
from subgate.plugin.hooks import HookRegistry
from subgate.plugin.main import SubscriberGatePlugin, register
from subgate.repositories.plugin_setting_repository import PluginSettingRepository
from subgate.services.settings_manager import DatabaseSettingsManager
from tests.factories.platform_seed import PLUGIN_NAME, seed_platform


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway sqlite database."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'subgate.db'}",
        plugin_name=PLUGIN_NAME,
        log_level="DEBUG",
    )


@pytest.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Async engine with every table created."""
    engine = create_async_engine(test_settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def seeded_session_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> async_sessionmaker[AsyncSession]:
    """Session factory over a database holding the seeded platform."""
    await seed_platform(session_factory)
    return session_factory


@pytest.fixture
async def db_session(
    seeded_session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """One session over the seeded platform."""
    async with seeded_session_factory() as session:
        yield session


@pytest.fixture
def settings_manager(
    seeded_session_factory: async_sessionmaker[AsyncSession],
) -> DatabaseSettingsManager:
    """Settings manager over the seeded platform."""
    return DatabaseSettingsManager(
        seeded_session_factory, PluginSettingRepository(PLUGIN_NAME)
    )


@pytest.fixture
async def plugin(
    settings_manager: DatabaseSettingsManager,
    seeded_session_factory: async_sessionmaker[AsyncSession],
    test_settings: Settings,
) -> AsyncGenerator[SubscriberGatePlugin, None]:
    """Plugin registered on a fresh hook registry over the seeded platform."""
    registered = await register(
        HookRegistry(), settings_manager, seeded_session_factory, test_settings
    )
    yield registered
    registered.unregister()
