from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto a structured API response."""

    status_code = 500
    error_code = "SERVER_ERROR"
    default_message = "Server error."

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class Unauthenticated(AppError):
    status_code = 401
    error_code = "UNAUTHENTICATED"
    default_message = "Missing token."


class InvalidToken(Unauthenticated):
    error_code = "INVALID_TOKEN"
    default_message = "Invalid token."


class Forbidden(AppError):
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Forbidden."


class NotFound(AppError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Not found."


class LinkUnavailable(NotFound):
    """
    Unknown, inactive and expired links are reported identically so the
    response never reveals which check failed.
    """

    error_code = "LINK_UNAVAILABLE"
    default_message = "Link not found, expired, or inactive."


class Conflict(AppError):
    status_code = 409
    error_code = "CONFLICT"
    default_message = "Resource already exists."


class AlreadySubmitted(Conflict):
    error_code = "ALREADY_SUBMITTED"
    default_message = "Documents already uploaded for this candidate."


class InvalidArtifact(AppError):
    status_code = 400
    error_code = "INVALID_ARTIFACT"
    default_message = "Only JPG/PNG/PDF allowed."


class ValidationError(AppError):
    status_code = 422
    error_code = "VALIDATION_ERROR"
    default_message = "Request validation failed."

    def __init__(self, message: Optional[str] = None, fields: Optional[Dict[str, str]] = None):
        super().__init__(message, details={"fields": fields or {}})


class RateLimited(AppError):
    status_code = 429
    error_code = "RATE_LIMITED"
    default_message = "Too many requests."


def _envelope(request: Request, code: str, message: str, details: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "error": {"code": code, "message": message, "details": details},
        "request_id": getattr(request.state, "request_id", None),
        "path": request.url.path,
        "method": request.method,
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "api_error",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "request_id": getattr(request.state, "request_id", None),
        },
    )
    headers = {"Retry-After": "60"} if isinstance(exc, RateLimited) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(request, exc.error_code, exc.message, exc.details),
        headers=headers,
    )


def _field_name(loc) -> str:
    # ("body", "email") -> "email"; ("query", "page") -> "page"
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "form")]
    return ".".join(parts) or "body"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields: Dict[str, str] = {}
    for err in exc.errors():
        name = _field_name(err.get("loc", ()))
        msg = str(err.get("msg", "Invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        fields.setdefault(name, msg)

    return await app_error_handler(request, ValidationError(fields=fields))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(request, "HTTP_ERROR", str(exc.detail), {}),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_exception",
        extra={
            "exception_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
            "request_id": getattr(request.state, "request_id", None),
        },
    )
    return JSONResponse(
        status_code=500,
        content=_envelope(request, "SERVER_ERROR", "Server error.", {}),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
