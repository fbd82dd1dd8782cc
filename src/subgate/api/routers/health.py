"""Health check endpoint."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subgate import __version__
from subgate.api.deps import get_plugin, get_session_factory
from subgate.api.schemas import HealthStatus
from subgate.plugin.main import SubscriberGatePlugin

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthStatus)
async def health_check(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    plugin: SubscriberGatePlugin = Depends(get_plugin),
) -> HealthStatus:
    """
    Report database connectivity and the active global overrides.
    """
    db_status = "disconnected"
    db_latency_ms: Optional[int] = None
    try:
        start = time.monotonic()
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        db_latency_ms = int((time.monotonic() - start) * 1000)
        db_status = "connected"
    except Exception:
        logger.warning("Database health check failed", exc_info=True)

    policy = plugin.policy_provider.current
    return HealthStatus(
        status="healthy" if db_status == "connected" else "unhealthy",
        version=__version__,
        database=db_status,
        global_subscriber_only=policy.global_subscriber_only,
        global_deny_download=policy.global_deny_download,
        timestamp=datetime.now(timezone.utc),
        database_latency_ms=db_latency_ms,
    )
