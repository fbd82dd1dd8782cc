"""
Tests for policy, access and video payload models.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from subgate.models.access import (
    DOWNLOADS_DISABLED_MESSAGE,
    AccessDecision,
    ChannelMembership,
    DownloadPermission,
)
from subgate.models.enums import AccessReason
from subgate.models.policy import PolicyConfig
from subgate.models.video import ChannelRef, VideoListResult, VideoRecord


class TestPolicyConfig:
    """Tests for PolicyConfig."""

    def test_defaults_have_no_override(self) -> None:
        assert PolicyConfig().has_override is False

    def test_from_settings_literal_true_only(self) -> None:
        policy = PolicyConfig.from_settings(
            {"global-subscriber-only": True, "global-deny-download": "true"}
        )
        assert policy.global_subscriber_only is True
        assert policy.global_deny_download is False
        assert policy.has_override is True

    def test_snapshot_is_immutable(self) -> None:
        policy = PolicyConfig()
        with pytest.raises(ValidationError):
            policy.global_subscriber_only = True  # type: ignore[misc]


class TestAccessModels:
    """Tests for decision and permission models."""

    def test_allow_and_deny(self) -> None:
        assert AccessDecision.allow().reason == AccessReason.OK
        denied = AccessDecision.deny(AccessReason.NOT_SUBSCRIBED)
        assert denied.allowed is False

    def test_download_permission_hook_result(self) -> None:
        assert DownloadPermission(allowed=True).to_hook_result() == {"allowed": True}
        assert DownloadPermission.denied(DOWNLOADS_DISABLED_MESSAGE).to_hook_result() == {
            "allowed": False,
            "errorMessage": DOWNLOADS_DISABLED_MESSAGE,
        }

    def test_membership_grants(self) -> None:
        membership = ChannelMembership(owned=frozenset({1}), followed=frozenset({2}))
        assert membership.grants(1)
        assert membership.grants(2)
        assert not membership.grants(3)
        assert not membership.grants(None)


class TestVideoRecord:
    """Tests for VideoRecord payload handling."""

    @pytest.mark.parametrize(
        "payload, expected",
        [
            ({"channel": {"id": 5}}, 5),
            ({"channelId": 6}, 6),
            ({"videoChannel": {"id": 7}}, 7),
            ({"channel": {"name": "no id"}, "channelId": 8}, 8),
            ({}, None),
        ],
    )
    def test_resolve_channel_id(self, payload: dict, expected: int | None) -> None:
        assert VideoRecord.model_validate(payload).resolve_channel_id() == expected

    def test_unknown_fields_round_trip(self) -> None:
        payload = {"id": 1, "uuid": "u", "views": 42, "channel": {"id": 3, "host": "x"}}
        assert VideoRecord.model_validate(payload).to_response() == payload

    def test_null_host_fields_round_trip(self) -> None:
        payload = {
            "id": 1,
            "uuid": "u",
            "channelId": 10,
            "description": None,
            "thumbnailPath": None,
            "VideoFiles": None,
        }
        assert VideoRecord.model_validate(payload).to_response() == payload

    def test_null_plugin_data_and_download_flag(self) -> None:
        video = VideoRecord.model_validate(
            {"id": 1, "pluginData": None, "downloadEnabled": None}
        )
        assert video.plugin_data == {}
        assert video.download_enabled is True

    def test_annotation_is_emitted(self) -> None:
        video = VideoRecord.model_validate({"id": 1})
        annotated = video.model_copy(update={"plugin_data": {"subscriber-only": True}})
        assert annotated.to_response() == {"id": 1, "pluginData": {"subscriber-only": True}}

    def test_has_media(self) -> None:
        assert not VideoRecord().has_media()
        assert not VideoRecord(files=[], streaming_playlists=[]).has_media()
        assert VideoRecord.model_validate({"VideoFiles": [{"id": 1}]}).has_media()

    def test_list_result_response(self) -> None:
        page = VideoListResult(data=[VideoRecord(id=1, channel=ChannelRef(id=2))], total=1)
        assert page.to_response() == {
            "data": [
                {"id": 1, "channel": {"id": 2}}
            ],
            "total": 1,
        }
