# auth/middleware.py
"""
FastAPI authentication dependencies.

Provides:
- Access to the app-scoped AuthService, RateLimiter and Database
- The request-context guard that every protected route depends on
- Rate-limit enforcement helper for route handlers
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from app.errors import RateLimitedError, UnauthorizedError
from app.rate_limiter import RateLimiter, RateLimitPolicy, get_client_ip
from auth.service import AuthService
from persistence.db import Database


@dataclass(frozen=True)
class AdminContext:
    """
    The authenticated principal handed to domain operations.

    client_ip is best-effort and only used for rate-limit keys.
    """
    user_id: str
    email: str
    client_ip: str


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_cookie_header(request: Request) -> Optional[str]:
    return request.headers.get("cookie")


async def require_admin_context(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> AdminContext:
    """
    FastAPI dependency: the authenticated owner (required).

    Raises UnauthorizedError (401) before any domain logic runs when the
    cookie is missing, forged, expired or revoked.
    """
    active = auth_service.require_session(get_cookie_header(request))
    if active is None:
        raise UnauthorizedError()

    return AdminContext(
        user_id=active.user.id,
        email=active.user.email,
        client_ip=get_client_ip(request),
    )


def enforce_rate_limit(
    limiter: RateLimiter,
    key: str,
    policy: RateLimitPolicy,
    message: str = "Rate limit exceeded",
) -> None:
    """Consume one hit for key, raising RateLimitedError (429) when over quota."""
    result = limiter.consume(key, policy)
    if result.limited:
        raise RateLimitedError(message, retry_after=result.retry_after(limiter.clock()))
