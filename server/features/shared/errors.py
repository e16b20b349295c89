from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for errors rendered as ``{"error", "message", "code"}`` responses."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"
    error: str = "Internal server error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        error: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if error is not None:
            self.error = error
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": self.error,
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    error = "Invalid request"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    error = "Not found"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    error = "Conflict"


def error_response(exc: AppError, *, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


def _route_label(request: Request) -> str:
    # Route templates keep path parameters (phone numbers, media ids) out of logs.
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    return f"{request.method} {template or '<unmatched route>'}"


async def _handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s failed with %s (%d): %s",
            _route_label(request),
            exc.code,
            exc.status_code,
            exc.message,
        )
    else:
        logger.info("%s failed with %s (%d).", _route_label(request), exc.code, exc.status_code)
    return error_response(exc)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(part) for part in item.get("loc", ())) for item in exc.errors()]
    return error_response(
        ValidationError(
            "Request payload failed validation.",
            details={"fields": fields},
        )
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", _route_label(request))
    return error_response(AppError("An unexpected error occurred."))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _handle_app_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(Exception, _handle_unexpected)


__all__ = [
    "AppError",
    "ConflictError",
    "NotFoundError",
    "ValidationError",
    "error_response",
    "register_error_handlers",
]
