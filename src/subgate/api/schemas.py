"""Request and response schemas for the subgate API."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(str, Enum):
    """Application error codes carried in problem responses."""

    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_SETTING = "UNKNOWN_SETTING"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_TITLES: Dict[ErrorCode, str] = {
    ErrorCode.NOT_FOUND: "Resource Not Found",
    ErrorCode.BAD_REQUEST: "Bad Request",
    ErrorCode.FORBIDDEN: "Forbidden",
    ErrorCode.VALIDATION_ERROR: "Validation Error",
    ErrorCode.UNKNOWN_SETTING: "Unknown Setting",
    ErrorCode.INTERNAL_ERROR: "Internal Server Error",
}


class ProblemDetail(BaseModel):
    """RFC 7807 problem details body."""

    type: str = "about:blank"
    title: str
    status: int = Field(..., ge=400, le=599)
    detail: str
    instance: str
    code: str


class ProblemJSONResponse(JSONResponse):
    """JSONResponse with the ``application/problem+json`` media type."""

    media_type = "application/problem+json"


def problem_response(code: ErrorCode, status: int, detail: str, instance: str) -> ProblemJSONResponse:
    """Build a problem response for an error code."""
    problem = ProblemDetail(
        title=ERROR_TITLES.get(code, "Error"),
        status=status,
        detail=detail,
        instance=instance,
        code=code.value,
    )
    return ProblemJSONResponse(content=problem.model_dump(), status_code=status)


class HealthStatus(BaseModel):
    """Application health status."""

    model_config = ConfigDict(strict=True)

    status: str  # "healthy", "unhealthy"
    version: str
    database: str  # "connected", "disconnected"
    global_subscriber_only: bool
    global_deny_download: bool
    timestamp: datetime
    database_latency_ms: Optional[int] = None


class VideoUpdateRequest(BaseModel):
    """Body of a video update; only the plugin data is acted upon."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    plugin_data: Optional[Dict[str, Any]] = Field(default=None, alias="pluginData")


class VideoUpdateResponse(BaseModel):
    """Flags stored for a video after an update."""

    uuid: str
    flags: Optional[Dict[str, Optional[bool]]] = None


class SettingsResponse(BaseModel):
    """All plugin settings with their current values."""

    settings: Dict[str, Any]


class SettingsUpdateRequest(BaseModel):
    """Partial settings update."""

    settings: Dict[str, Any]


class VideoFieldsResponse(BaseModel):
    """Per-video form field descriptors."""

    fields: List[Dict[str, Any]]
