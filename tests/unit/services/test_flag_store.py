"""
Tests for FlagStore.
"""

from __future__ import annotations

import asyncio
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from subgate.models.flags import VideoFlags
from subgate.repositories.video_flag_repository import VideoFlagRepository
from subgate.services.flag_store import FlagStore
from tests.factories.platform_seed import (
    PUBLIC_OWNED_UUID,
    RESTRICTED_OTHER_UUID,
    RESTRICTED_OWNED_UUID,
)

pytestmark = pytest.mark.asyncio


def _mock_session_factory() -> MagicMock:
    session = AsyncMock(spec=AsyncSession)
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


class TestFlagStore:
    """Tests for FlagStore against the seeded database."""

    async def test_get(self, flag_store: FlagStore) -> None:
        assert (await flag_store.get(RESTRICTED_OWNED_UUID)) == VideoFlags(
            subscriber_only=True, deny_download=False
        )

    async def test_get_many_dedups(self, flag_store: FlagStore) -> None:
        result = await flag_store.get_many(
            [RESTRICTED_OWNED_UUID, PUBLIC_OWNED_UUID, RESTRICTED_OWNED_UUID]
        )
        assert set(result) == {RESTRICTED_OWNED_UUID, PUBLIC_OWNED_UUID}
        assert result[PUBLIC_OWNED_UUID] is None

    async def test_get_many_empty(self, flag_store: FlagStore) -> None:
        assert await flag_store.get_many([]) == {}

    async def test_set_commits(self, flag_store: FlagStore) -> None:
        flags = VideoFlags(subscriber_only=True, deny_download=True)
        await flag_store.set(PUBLIC_OWNED_UUID, flags)
        assert await flag_store.get(PUBLIC_OWNED_UUID) == flags


class TestFlagStoreConcurrency:
    """Unbatched reads stay within the concurrency bound."""

    async def test_semaphore_bounds_reads(self) -> None:
        in_flight = 0
        peak = 0

        async def slow_get(session: AsyncSession, uuid: str) -> Optional[VideoFlags]:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return VideoFlags(subscriber_only=uuid.endswith("1"))

        repository = AsyncMock(spec=VideoFlagRepository)
        repository.get_flags.side_effect = slow_get
        store = FlagStore(
            _mock_session_factory(), repository, max_concurrency=3, batch_reads=False
        )

        uuids = [f"video-{n}" for n in range(10)]
        result = await store.get_many(uuids)

        assert list(result) == uuids
        assert peak <= 3
        assert repository.get_flags.await_count == 10
        repository.get_many_flags.assert_not_called()

    async def test_batched_reads_use_one_query(self) -> None:
        repository = AsyncMock(spec=VideoFlagRepository)
        repository.get_many_flags.return_value = {RESTRICTED_OTHER_UUID: None}
        store = FlagStore(_mock_session_factory(), repository)

        await store.get_many([RESTRICTED_OTHER_UUID])

        repository.get_many_flags.assert_awaited_once()
        repository.get_flags.assert_not_called()
