# app/routers/auth.py
"""
Authentication API endpoints.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from app.errors import UnauthorizedError
from app.rate_limiter import LOGIN_POLICY, RateLimiter, get_client_ip
from auth.middleware import (
    AdminContext,
    enforce_rate_limit,
    get_auth_service,
    get_cookie_header,
    get_rate_limiter,
    require_admin_context,
)
from auth.service import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
TOO_MANY_ATTEMPTS_MESSAGE = "Too many login attempts. Please wait before retrying."


@router.post("/login")
async def login(
    request: Request,
    body: dict[str, Any] = Body(...),
    auth_service: AuthService = Depends(get_auth_service),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Login with email/password; sets the session cookie."""
    client_ip = get_client_ip(request)
    enforce_rate_limit(limiter, f"login:{client_ip}", LOGIN_POLICY, TOO_MANY_ATTEMPTS_MESSAGE)

    result = auth_service.authenticate(body)
    if result is None:
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

    return JSONResponse(
        content={"user": {"id": result.user.id, "email": result.user.email}},
        headers={"Set-Cookie": result.cookie},
    )


@router.post("/logout")
async def logout(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Logout always succeeds and clears the cookie."""
    cleared = auth_service.sign_out(get_cookie_header(request))
    return JSONResponse(content={"success": True}, headers={"Set-Cookie": cleared})


@router.get("/me")
async def me(admin: AdminContext = Depends(require_admin_context)):
    """The authenticated owner."""
    return {"user": {"id": admin.user_id, "email": admin.email}}


@router.post("/rotate")
async def rotate(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Swap the current session for a fresh one."""
    result = auth_service.rotate_session(get_cookie_header(request))
    if result is None:
        raise UnauthorizedError()

    return JSONResponse(
        content={"user": {"id": result.user.id, "email": result.user.email}},
        headers={"Set-Cookie": result.cookie},
    )
