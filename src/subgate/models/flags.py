"""
Per-video flag models and normalization.

Flags reach subgate from form submissions, JSON API bodies and the
key-value store, each with its own encoding of a boolean. Everything is
funnelled through ``normalize_flag`` which maps a closed set of literal
encodings to ``True``/``False`` and everything else to ``None`` ("no
opinion").
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .policy import PolicyConfig

logger = logging.getLogger(__name__)

# Plugin-visible metadata keys on a video
VIDEO_FIELD_SUBSCRIBER_ONLY = "subscriber-only"
VIDEO_FIELD_DENY_DOWNLOAD = "deny-download"
PLUGIN_BLOCKED_FLAG = "subscriber-only-blocked"

# Storage key prefix, followed by the video uuid
VIDEO_FLAGS_STORAGE_PREFIX = "video-flags:"

_TRUE_STRINGS = frozenset({"on", "1", "true"})
_FALSE_STRINGS = frozenset({"off", "0", "false"})


def normalize_flag(value: Any) -> Optional[bool]:
    """
    Map a raw flag encoding to a boolean, or ``None`` when it is not one.

    Accepted encodings are ``"on"``, ``1``, ``"1"``, ``True`` and ``"true"``
    for true, and ``"off"``, ``0``, ``"0"``, ``False`` and ``"false"`` for
    false. Matching is exact: ``"TRUE"``, ``2`` or ``1.0`` are not flags.

    Parameters
    ----------
    value : Any
        Raw value from a request body, form field or storage record.

    Returns
    -------
    Optional[bool]
        The boolean the value encodes, or None if it encodes nothing.

    Examples
    --------
    >>> normalize_flag("on"), normalize_flag(0), normalize_flag("maybe")
    (True, False, None)
    """
    # bool is a subclass of int, so it has to be matched first
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value == 1:
            return True
        if value == 0:
            return False
        return None
    if isinstance(value, str):
        if value in _TRUE_STRINGS:
            return True
        if value in _FALSE_STRINGS:
            return False
    return None


def storage_key(video_uuid: str) -> str:
    """Return the key-value storage key for a video's flags."""
    return f"{VIDEO_FLAGS_STORAGE_PREFIX}{video_uuid}"


class VideoFlags(BaseModel):
    """Per-video flags as stored; either field may be unset."""

    subscriber_only: Optional[bool] = Field(default=None, alias="subscriberOnly")
    deny_download: Optional[bool] = Field(default=None, alias="denyDownload")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_storage(self) -> dict[str, Optional[bool]]:
        """Return the canonical JSON-ready record persisted for this video."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_storage(cls, raw: Any) -> Optional["VideoFlags"]:
        """
        Parse a stored record, which may itself be string-encoded JSON.

        Parameters
        ----------
        raw : Any
            Value read from storage: a mapping, a JSON string, or empty.

        Returns
        -------
        Optional[VideoFlags]
            Parsed flags, or None when nothing usable was stored.
        """
        if not raw:
            return None

        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except ValueError:
                logger.warning("Ignoring malformed stored video flags: %r", raw)
                return None

        if not isinstance(raw, Mapping):
            return None

        return cls(
            subscriber_only=normalize_flag(raw.get("subscriberOnly")),
            deny_download=normalize_flag(raw.get("denyDownload")),
        )


class EffectiveFlags(BaseModel):
    """Flags actually enforced for a video after applying global overrides."""

    subscriber_only: bool = False
    deny_download: bool = False

    model_config = ConfigDict(frozen=True)

    @classmethod
    def resolve(
        cls, policy: PolicyConfig, stored: Optional[VideoFlags]
    ) -> "EffectiveFlags":
        """
        Combine the instance policy with a video's stored flags.

        A true global override wins outright; the stored flag is only read
        when the matching override is off, and an unset stored flag counts
        as false.
        """
        if policy.global_subscriber_only:
            subscriber_only = True
        else:
            subscriber_only = bool(stored and stored.subscriber_only)

        if policy.global_deny_download:
            deny_download = True
        else:
            deny_download = bool(stored and stored.deny_download)

        return cls(subscriber_only=subscriber_only, deny_download=deny_download)


def extract_flags_from_body(body: Any) -> Optional[VideoFlags]:
    """
    Pull the two flag fields out of a video update payload.

    Both ``pluginData`` and ``plugin_data`` are accepted as the container
    key. Fields that are absent or not valid encodings become ``False``.

    Parameters
    ----------
    body : Any
        The update request body as received by the host.

    Returns
    -------
    Optional[VideoFlags]
        Fully populated flags, or None when the body carries no plugin data.
    """
    if not isinstance(body, Mapping):
        return None

    plugin_data = body.get("pluginData")
    if plugin_data is None:
        plugin_data = body.get("plugin_data")
    if not isinstance(plugin_data, Mapping):
        return None

    subscriber_only = normalize_flag(plugin_data.get(VIDEO_FIELD_SUBSCRIBER_ONLY))
    deny_download = normalize_flag(plugin_data.get(VIDEO_FIELD_DENY_DOWNLOAD))

    return VideoFlags(
        subscriber_only=bool(subscriber_only),
        deny_download=bool(deny_download),
    )
