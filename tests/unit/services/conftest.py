"""
Shared fixtures for service tests.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subgate.models.policy import PolicyConfig
from subgate.repositories.membership_repository import MembershipRepository
from subgate.repositories.video_flag_repository import VideoFlagRepository
from subgate.services.flag_store import FlagStore
from subgate.services.membership_resolver import MembershipResolver
from subgate.services.policy_config import PolicyConfigProvider
from tests.factories.platform_seed import PLUGIN_NAME


@pytest.fixture
def mock_resolver() -> AsyncMock:
    """Resolver for a regular user with no ownership or follows."""
    resolver = AsyncMock(spec=MembershipResolver)
    resolver.is_root_admin.return_value = False
    resolver.owns_video.return_value = False
    resolver.follows_channel.return_value = False
    return resolver


@pytest.fixture
def mock_flag_store() -> AsyncMock:
    """Flag store with nothing stored."""
    store = AsyncMock(spec=FlagStore)
    store.get.return_value = None
    store.get_many.return_value = {}
    return store


@pytest.fixture
def policy_provider() -> PolicyConfigProvider:
    """Provider with both overrides off."""
    return PolicyConfigProvider(PolicyConfig())


@pytest.fixture
def resolver(seeded_session_factory: async_sessionmaker[AsyncSession]) -> MembershipResolver:
    """Resolver over the seeded platform."""
    return MembershipResolver(seeded_session_factory, MembershipRepository())


@pytest.fixture
def flag_store(seeded_session_factory: async_sessionmaker[AsyncSession]) -> FlagStore:
    """Flag store over the seeded platform."""
    return FlagStore(seeded_session_factory, VideoFlagRepository(PLUGIN_NAME))
