"""FastAPI application for the subgate API."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from subgate import __version__
from subgate.api.exception_handlers import register_exception_handlers
from subgate.api.routers import health, plugin_settings, videos
from subgate.config.logging import configure_logging
from subgate.config.settings import settings
from subgate.container import container

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Register the plugin on startup and release connections on shutdown."""
    configure_logging(settings.log_level)
    await container.get_plugin()
    logger.info("subgate API started")
    yield
    container.reset()
    await container.database.close()


app = FastAPI(
    title="subgate API",
    description="Subscriber-only visibility and download gating for video listings",
    version=__version__,
    lifespan=lifespan,
)


def _get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxied requests."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


@app.middleware("http")
async def log_requests(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    """
    Log each request and its response status and timing.

    Responses are logged at INFO for 2xx/3xx, WARNING for 4xx and ERROR
    for 5xx.
    """
    start_time = time.perf_counter()
    method = request.method
    path = request.url.path

    logger.info("Request: %s %s from %s", method, path, _get_client_ip(request))

    response = await call_next(request)

    duration = time.perf_counter() - start_time
    status_code = response.status_code
    if status_code >= 500:
        log_level = logging.ERROR
    elif status_code >= 400:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO

    logger.log(
        log_level, "Response: %s %s - %d (%.3fs)", method, path, status_code, duration
    )
    return response


register_exception_handlers(app)

app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(videos.router, prefix="/api/v1", tags=["videos"])
app.include_router(plugin_settings.router, prefix="/api/v1", tags=["plugin"])
