"""Centralized exception handlers converting subgate errors to problem responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from subgate.api.schemas import ErrorCode, ProblemJSONResponse, problem_response
from subgate.exceptions import (
    BadRequestError,
    NotFoundError,
    SettingsError,
    SubgateError,
)

logger = logging.getLogger(__name__)


async def not_found_error_handler(request: Request, exc: NotFoundError) -> ProblemJSONResponse:
    """Map NotFoundError to 404."""
    return problem_response(ErrorCode.NOT_FOUND, 404, exc.message, request.url.path)


async def bad_request_error_handler(
    request: Request, exc: BadRequestError
) -> ProblemJSONResponse:
    """Map BadRequestError to 400."""
    return problem_response(ErrorCode.BAD_REQUEST, 400, exc.message, request.url.path)


async def settings_error_handler(request: Request, exc: SettingsError) -> ProblemJSONResponse:
    """Map settings validation errors to 400."""
    return problem_response(ErrorCode.UNKNOWN_SETTING, 400, exc.message, request.url.path)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> ProblemJSONResponse:
    """Map request validation failures to 422."""
    errors = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
        for error in exc.errors()
    )
    return problem_response(
        ErrorCode.VALIDATION_ERROR, 422, errors or "Invalid request", request.url.path
    )


async def subgate_error_handler(request: Request, exc: SubgateError) -> ProblemJSONResponse:
    """
    Map any other SubgateError to 500.

    The internal message is logged, never returned.
    """
    logger.error("Unhandled subgate error: %s", exc.message, exc_info=exc)
    return problem_response(
        ErrorCode.INTERNAL_ERROR, 500, "An internal error occurred", request.url.path
    )


async def generic_error_handler(request: Request, exc: Exception) -> ProblemJSONResponse:
    """Catch-all for unexpected exceptions."""
    logger.exception("Unhandled exception: %s", exc)
    return problem_response(
        ErrorCode.INTERNAL_ERROR, 500, "An unexpected error occurred", request.url.path
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers on the FastAPI app.

    Parameters
    ----------
    app : FastAPI
        The FastAPI application instance.
    """
    app.add_exception_handler(NotFoundError, not_found_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(BadRequestError, bad_request_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SettingsError, settings_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SubgateError, subgate_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_error_handler)
