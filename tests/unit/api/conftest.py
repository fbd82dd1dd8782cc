"""
Fixtures for API tests.

The ASGI transport does not run the application lifespan, so every
dependency that would reach the global container is overridden to point at
the seeded test database and a plugin registered on a fresh hook registry.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subgate.api.deps import (
    get_db,
    get_plugin,
    get_session_factory,
    get_settings_manager,
)
from subgate.api.main import app
from subgate.plugin.main import SubscriberGatePlugin
from subgate.services.settings_manager import DatabaseSettingsManager


@pytest.fixture
async def client(
    seeded_session_factory: async_sessionmaker[AsyncSession],
    plugin: SubscriberGatePlugin,
    settings_manager: DatabaseSettingsManager,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app wired to the seeded platform."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with seeded_session_factory() as session:
            yield session

    async def override_get_plugin() -> SubscriberGatePlugin:
        return plugin

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_plugin] = override_get_plugin
    app.dependency_overrides[get_settings_manager] = lambda: settings_manager
    app.dependency_overrides[get_session_factory] = lambda: seeded_session_factory

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
