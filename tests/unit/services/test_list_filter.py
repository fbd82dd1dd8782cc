"""
Tests for ListFilter.
"""

from __future__ import annotations

from typing import List
from unittest.mock import AsyncMock

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subgate.exceptions import FlagStoreError, MembershipLookupError
from subgate.models.access import ChannelMembership
from subgate.models.flags import VideoFlags
from subgate.models.policy import PolicyConfig
from subgate.models.video import ChannelRef, VideoListResult, VideoRecord
from subgate.repositories.video_flag_repository import VideoFlagRepository
from subgate.services.flag_store import FlagStore
from subgate.services.list_filter import ListFilter
from subgate.services.membership_resolver import MembershipResolver
from subgate.services.policy_config import PolicyConfigProvider
from tests.factories.platform_seed import (
    ADMIN_ID,
    FOLLOWER_ID,
    OWNER_ID,
    PLUGIN_NAME,
    RESTRICTED_OTHER_UUID,
    RESTRICTED_OWNED_UUID,
    STRANGER_ID,
    VIDEOS,
)
from tests.factories.video_factory import VideoRecordFactory

pytestmark = pytest.mark.asyncio


def _page(videos: List[VideoRecord]) -> VideoListResult:
    return VideoListResult(data=videos, total=len(videos) + 10)


def _seeded_page() -> VideoListResult:
    return _page(
        [
            VideoRecord(id=video_id, uuid=uuid, channel=ChannelRef(id=channel_id))
            for video_id, uuid, channel_id in VIDEOS
        ]
    )


class TestListFilterWithMocks:
    """Filtering decisions with mocked lookups."""

    @pytest.fixture
    def list_filter(
        self,
        mock_resolver: AsyncMock,
        mock_flag_store: AsyncMock,
        policy_provider: PolicyConfigProvider,
    ) -> ListFilter:
        return ListFilter(mock_resolver, mock_flag_store, policy_provider)

    @pytest.fixture
    def videos(self, mock_flag_store: AsyncMock) -> List[VideoRecord]:
        """Five videos on channels 1..5; the second and fourth are subscriber-only."""
        videos = [VideoRecordFactory.build(channel=ChannelRef(id=n)) for n in range(1, 6)]
        mock_flag_store.get_many.return_value = {
            video.uuid: (
                VideoFlags(subscriber_only=True, deny_download=False)
                if index in (1, 3)
                else None
            )
            for index, video in enumerate(videos)
        }
        return videos

    async def test_follower_of_one_restricted_channel(
        self,
        list_filter: ListFilter,
        mock_resolver: AsyncMock,
        videos: List[VideoRecord],
    ) -> None:
        mock_resolver.resolve.return_value = ChannelMembership(followed=frozenset({2}))

        result = await list_filter.filter(_page(videos), identity=7)

        assert [v.uuid for v in result.data] == [videos[i].uuid for i in (0, 1, 2, 4)]
        assert result.total == 4

    async def test_anonymous_sees_unrestricted_only(
        self, list_filter: ListFilter, mock_resolver: AsyncMock, videos: List[VideoRecord]
    ) -> None:
        result = await list_filter.filter(_page(videos), identity=None)

        assert [v.uuid for v in result.data] == [videos[i].uuid for i in (0, 2, 4)]
        assert result.total == 3
        mock_resolver.resolve.assert_not_called()
        mock_resolver.is_root_admin.assert_not_called()

    async def test_admin_sees_everything(
        self,
        list_filter: ListFilter,
        mock_resolver: AsyncMock,
        mock_flag_store: AsyncMock,
        videos: List[VideoRecord],
    ) -> None:
        mock_resolver.is_root_admin.return_value = True

        result = await list_filter.filter(_page(videos), identity=1)

        assert result.data == videos
        assert result.total == 5
        mock_flag_store.get_many.assert_not_called()

    async def test_no_restricted_items_skips_membership(
        self, list_filter: ListFilter, mock_resolver: AsyncMock
    ) -> None:
        videos = VideoRecordFactory.build_batch(3)

        result = await list_filter.filter(_page(videos), identity=7)

        assert result.data == videos
        assert result.total == 3
        mock_resolver.resolve.assert_not_called()

    async def test_flags_read_in_one_batch(
        self, list_filter: ListFilter, mock_flag_store: AsyncMock, videos: List[VideoRecord]
    ) -> None:
        await list_filter.filter(_page(videos), identity=None)

        mock_flag_store.get_many.assert_awaited_once()
        mock_flag_store.get.assert_not_called()

    async def test_membership_failure_returns_empty_page(
        self,
        list_filter: ListFilter,
        mock_resolver: AsyncMock,
        videos: List[VideoRecord],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        mock_resolver.resolve.side_effect = MembershipLookupError("down", user_id=7)

        result = await list_filter.filter(_page(videos), identity=7)

        assert result.data == []
        assert result.total == 0
        assert "returning an empty page" in caplog.text

    async def test_flag_read_failure_restricts_page(
        self,
        list_filter: ListFilter,
        mock_resolver: AsyncMock,
        mock_flag_store: AsyncMock,
        videos: List[VideoRecord],
    ) -> None:
        mock_flag_store.get_many.side_effect = FlagStoreError("down")
        mock_resolver.resolve.return_value = ChannelMembership(owned=frozenset({3}))

        result = await list_filter.filter(_page(videos), identity=7)

        assert [v.uuid for v in result.data] == [videos[2].uuid]
        assert result.total == 1

    async def test_admin_lookup_failure_filters_as_user(
        self, list_filter: ListFilter, mock_resolver: AsyncMock, videos: List[VideoRecord]
    ) -> None:
        mock_resolver.is_root_admin.side_effect = MembershipLookupError("down", user_id=1)
        mock_resolver.resolve.return_value = ChannelMembership()

        result = await list_filter.filter(_page(videos), identity=1)

        assert result.total == 3

    async def test_global_override_restricts_everything(
        self, mock_resolver: AsyncMock, mock_flag_store: AsyncMock, videos: List[VideoRecord]
    ) -> None:
        provider = PolicyConfigProvider(PolicyConfig(global_subscriber_only=True))
        list_filter = ListFilter(mock_resolver, mock_flag_store, provider)
        mock_resolver.resolve.return_value = ChannelMembership(owned=frozenset({5}))

        result = await list_filter.filter(_page(videos), identity=7)

        assert [v.uuid for v in result.data] == [videos[4].uuid]
        mock_flag_store.get_many.assert_not_called()

    async def test_stored_flags_win_over_annotation(
        self, list_filter: ListFilter, mock_flag_store: AsyncMock
    ) -> None:
        videos = [
            VideoRecordFactory.build(plugin_data={"subscriber-only": "on"}),
            VideoRecordFactory.build(plugin_data={"subscriber-only": False}),
        ]
        mock_flag_store.get_many.return_value = {
            videos[0].uuid: VideoFlags(subscriber_only=False, deny_download=False),
            videos[1].uuid: VideoFlags(subscriber_only=True, deny_download=False),
        }

        result = await list_filter.filter(_page(videos), identity=None)

        assert result.data == [videos[0]]
        mock_flag_store.get_many.assert_awaited_once_with([v.uuid for v in videos])

    async def test_restricted_video_without_channel_is_dropped(
        self, list_filter: ListFilter, mock_resolver: AsyncMock, mock_flag_store: AsyncMock
    ) -> None:
        video = VideoRecord(id=1, uuid="orphan")
        mock_flag_store.get_many.return_value = {"orphan": VideoFlags(subscriber_only=True)}
        mock_resolver.resolve.return_value = ChannelMembership(owned=frozenset({1}))

        result = await list_filter.filter(_page([video]), identity=7)

        assert result.data == []

    @settings(
        max_examples=50,
        suppress_health_check=[HealthCheck.function_scoped_fixture],
    )
    @given(
        restricted=st.lists(st.booleans(), max_size=12),
        granted=st.frozensets(st.integers(min_value=0, max_value=11)),
    )
    async def test_order_preserved_and_total_matches(
        self,
        list_filter: ListFilter,
        mock_resolver: AsyncMock,
        mock_flag_store: AsyncMock,
        restricted: List[bool],
        granted: frozenset,
    ) -> None:
        videos = [
            VideoRecordFactory.build(channel=ChannelRef(id=index))
            for index in range(len(restricted))
        ]
        mock_flag_store.get_many.side_effect = None
        mock_flag_store.get_many.return_value = {
            video.uuid: VideoFlags(subscriber_only=flag)
            for video, flag in zip(videos, restricted)
        }
        mock_resolver.resolve.return_value = ChannelMembership(followed=granted)

        result = await list_filter.filter(_page(videos), identity=7)

        expected = [
            video.uuid
            for video, flag in zip(videos, restricted)
            if not flag or video.channel is not None and video.channel.id in granted
        ]
        assert [v.uuid for v in result.data] == expected
        assert result.total == len(result.data)


class TestListFilterSeeded:
    """The five-video scenario decided against the database."""

    @pytest.fixture
    def list_filter(self, resolver: MembershipResolver, flag_store: FlagStore) -> ListFilter:
        return ListFilter(resolver, flag_store, PolicyConfigProvider())

    async def test_follower_sees_four(self, list_filter: ListFilter) -> None:
        result = await list_filter.filter(_seeded_page(), FOLLOWER_ID)

        assert RESTRICTED_OTHER_UUID not in [v.uuid for v in result.data]
        assert RESTRICTED_OWNED_UUID in [v.uuid for v in result.data]
        assert len(result.data) == 4
        assert result.total == 4

    async def test_anonymous_sees_three(self, list_filter: ListFilter) -> None:
        result = await list_filter.filter(_seeded_page(), None)
        assert result.total == 3

    async def test_stranger_sees_own_restricted_video(self, list_filter: ListFilter) -> None:
        result = await list_filter.filter(_seeded_page(), STRANGER_ID)
        uuids = [v.uuid for v in result.data]
        assert RESTRICTED_OTHER_UUID in uuids
        assert RESTRICTED_OWNED_UUID not in uuids

    async def test_owner_sees_own_restricted_video(self, list_filter: ListFilter) -> None:
        result = await list_filter.filter(_seeded_page(), OWNER_ID)
        assert result.total == 4

    async def test_admin_sees_all(self, list_filter: ListFilter) -> None:
        result = await list_filter.filter(_seeded_page(), ADMIN_ID)
        assert result.total == 5

    async def test_unbatched_reads_match(
        self,
        resolver: MembershipResolver,
        seeded_session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        store = FlagStore(
            seeded_session_factory,
            VideoFlagRepository(PLUGIN_NAME),
            max_concurrency=2,
            batch_reads=False,
        )
        list_filter = ListFilter(resolver, store, PolicyConfigProvider())

        result = await list_filter.filter(_seeded_page(), FOLLOWER_ID)

        assert result.total == 4
