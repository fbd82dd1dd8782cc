"""
Database models for subgate.

This module maps the subset of the host video platform's schema that the
membership queries read (users, accounts, channels, actors, follows and
videos) plus the two key-value tables subgate owns for per-video flags and
plugin settings. Table and column names follow the host's camelCase
convention.
"""

from __future__ import annotations

import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

# JSONB on PostgreSQL, plain JSON elsewhere (sqlite in tests)
JSONVariant = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class User(Base):
    """Platform user; role 0 is the root administrator."""

    __tablename__ = "user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[int] = mapped_column(Integer, nullable=False, default=2)

    accounts: Mapped[list["Account"]] = relationship("Account", back_populates="user")


class Account(Base):
    """Account owned by a local user (or remote, with no user)."""

    __tablename__ = "account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[Optional[int]] = mapped_column(
        "userId", Integer, ForeignKey("user.id", ondelete="CASCADE")
    )

    user: Mapped[Optional[User]] = relationship("User", back_populates="accounts")
    channels: Mapped[list["VideoChannel"]] = relationship(
        "VideoChannel", back_populates="account"
    )


class VideoChannel(Base):
    """Channel publishing videos, owned by an account."""

    __tablename__ = "videoChannel"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    account_id: Mapped[int] = mapped_column(
        "accountId", Integer, ForeignKey("account.id", ondelete="CASCADE"), nullable=False
    )

    account: Mapped[Account] = relationship("Account", back_populates="channels")
    videos: Mapped[list["Video"]] = relationship("Video", back_populates="channel")


class Actor(Base):
    """Federation actor; represents either an account or a channel."""

    __tablename__ = "actor"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    preferred_username: Mapped[str] = mapped_column(
        "preferredUsername", String(255), nullable=False
    )
    account_id: Mapped[Optional[int]] = mapped_column(
        "accountId", Integer, ForeignKey("account.id", ondelete="CASCADE")
    )
    video_channel_id: Mapped[Optional[int]] = mapped_column(
        "videoChannelId", Integer, ForeignKey("videoChannel.id", ondelete="CASCADE")
    )


class ActorFollow(Base):
    """Follow relationship between two actors."""

    __tablename__ = "actorFollow"
    __table_args__ = (UniqueConstraint("actorId", "targetActorId"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    actor_id: Mapped[int] = mapped_column(
        "actorId", Integer, ForeignKey("actor.id", ondelete="CASCADE"), nullable=False
    )
    target_actor_id: Mapped[int] = mapped_column(
        "targetActorId",
        Integer,
        ForeignKey("actor.id", ondelete="CASCADE"),
        nullable=False,
    )
    state: Mapped[str] = mapped_column(String(16), nullable=False, default="accepted")


class Video(Base):
    """Video row; the numeric id is mutable across re-imports, the uuid is stable."""

    __tablename__ = "video"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    uuid: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    channel_id: Mapped[int] = mapped_column(
        "channelId",
        Integer,
        ForeignKey("videoChannel.id", ondelete="CASCADE"),
        nullable=False,
    )
    download_enabled: Mapped[bool] = mapped_column(
        "downloadEnabled", default=True, nullable=False
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), server_default=func.now()
    )

    channel: Mapped[VideoChannel] = relationship("VideoChannel", back_populates="videos")
    files: Mapped[list["VideoFile"]] = relationship("VideoFile", back_populates="video")
    streaming_playlists: Mapped[list["VideoStreamingPlaylist"]] = relationship(
        "VideoStreamingPlaylist", back_populates="video"
    )


class VideoFile(Base):
    """Directly downloadable media file of a video."""

    __tablename__ = "videoFile"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    video_id: Mapped[int] = mapped_column(
        "videoId", Integer, ForeignKey("video.id", ondelete="CASCADE"), nullable=False
    )
    resolution: Mapped[int] = mapped_column(Integer, nullable=False)
    file_url: Mapped[str] = mapped_column("fileUrl", String(2000), nullable=False)

    video: Mapped[Video] = relationship("Video", back_populates="files")


class VideoStreamingPlaylist(Base):
    """HLS playlist of a video."""

    __tablename__ = "videoStreamingPlaylist"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    video_id: Mapped[int] = mapped_column(
        "videoId", Integer, ForeignKey("video.id", ondelete="CASCADE"), nullable=False
    )
    playlist_url: Mapped[str] = mapped_column("playlistUrl", String(2000), nullable=False)

    video: Mapped[Video] = relationship("Video", back_populates="streaming_playlists")


class PluginStorage(Base):
    """Key-value storage namespaced by plugin name (per-video flags live here)."""

    __tablename__ = "pluginStorage"
    __table_args__ = (UniqueConstraint("pluginName", "key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    plugin_name: Mapped[str] = mapped_column("pluginName", String(255), nullable=False)
    key: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Optional[Any]] = mapped_column(JSONVariant)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        "updatedAt",
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


class PluginSetting(Base):
    """Persisted plugin setting value."""

    __tablename__ = "pluginSetting"
    __table_args__ = (UniqueConstraint("pluginName", "name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    plugin_name: Mapped[str] = mapped_column("pluginName", String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Optional[Any]] = mapped_column(JSONVariant)
