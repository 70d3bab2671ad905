# auth/__init__.py
"""
Authentication module.

Provides:
- Owner accounts with bcrypt password hashing
- HMAC-signed session cookies backed by revocable session rows
- The admin-context guard for protected routes
"""

from auth.models import Session, User
from auth.service import ActiveSession, AuthResult, AuthService, Credentials, build_auth_service
from auth.session import SESSION_COOKIE_NAME, SessionCodec, SessionPayload

__all__ = [
    "User",
    "Session",
    "AuthService",
    "AuthResult",
    "ActiveSession",
    "Credentials",
    "build_auth_service",
    "SessionCodec",
    "SessionPayload",
    "SESSION_COOKIE_NAME",
]
