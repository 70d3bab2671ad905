# app/errors.py
"""
Error taxonomy and the single boundary translator.

Services raise; they never build responses. The handlers registered by
register_exception_handlers() turn each error into a JSON response:

- HttpError subclasses -> their status with {"error", "details"}
- validation failures  -> 400
- anything else        -> opaque 500, logged with traceback
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.correlation import get_request_id

logger = logging.getLogger(__name__)


class HttpError(Exception):
    """An error that maps directly onto an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str, details: Any = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(HttpError):
    status_code = 400


class UnauthorizedError(HttpError):
    """Missing, invalid, expired or revoked session; or bad credentials."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ForbiddenError(HttpError):
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(HttpError):
    status_code = 404

    def __init__(self, message: str = "Not Found"):
        super().__init__(message)


class ConflictError(HttpError):
    status_code = 409


class RateLimitedError(HttpError):
    """Quota exhausted; carries the number of seconds to wait."""

    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded", retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after


def _error_body(message: str, details: Any = None) -> dict:
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return body


async def http_error_handler(request: Request, exc: HttpError) -> JSONResponse:
    headers = {}
    if isinstance(exc, RateLimitedError) and exc.retry_after is not None:
        headers["Retry-After"] = str(exc.retry_after)
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.details),
        headers=headers or None,
    )


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors() if hasattr(exc, "errors") else []
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in errors
    ]
    return JSONResponse(
        status_code=400,
        content=_error_body("Invalid request payload", details),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = get_request_id(request) or "-"
    logger.exception(f"[{request_id}] Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=_error_body("Internal Server Error"))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error translators on an application."""
    app.add_exception_handler(HttpError, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
