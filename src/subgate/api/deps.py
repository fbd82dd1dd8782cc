"""FastAPI dependencies for API endpoints."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Header
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subgate.config.database import db_manager
from subgate.container import container
from subgate.exceptions import BadRequestError
from subgate.plugin.main import SubscriberGatePlugin
from subgate.services.settings_manager import DatabaseSettingsManager

USER_ID_HEADER = "X-User-Id"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for database session.

    Yields an async SQLAlchemy session that auto-commits on success
    and rolls back on exception.
    """
    async for session in db_manager.get_session():
        yield session


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Dependency for the shared session factory."""
    return container.session_factory


async def get_identity(
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
) -> Optional[int]:
    """
    Dependency resolving the requester from the ``X-User-Id`` header.

    The header is set by an authenticating proxy in front of the API. A
    missing or empty header is an anonymous requester.

    Raises
    ------
    BadRequestError
        If the header is present but not a positive integer.
    """
    if x_user_id is None or not x_user_id.strip():
        return None
    value = x_user_id.strip()
    if not value.isdigit() or int(value) <= 0:
        raise BadRequestError(f"Invalid {USER_ID_HEADER} header: {value!r}")
    return int(value)


async def get_plugin() -> SubscriberGatePlugin:
    """Dependency for the registered plugin."""
    return await container.get_plugin()


def get_settings_manager() -> DatabaseSettingsManager:
    """Dependency for the plugin settings manager."""
    return container.settings_manager
