# auth/session.py
"""
Signed session cookies.

The cookie value is self-contained and tamper-evident:

    base64url(JSON {token, userId, expiresAt}) + "." + base64url(HMAC-SHA256)

The signature proves the cookie came from us. It does not prove the session
is still live: the service layer also requires a matching row keyed by
hash_session_token(token), so logout and rotation revoke immediately.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from http.cookies import SimpleCookie
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.requests import cookie_parser

_logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "fourpaws_session"
SESSION_DURATION_SECONDS = 14 * 24 * 60 * 60  # 14 days
SESSION_MAX_AGE_SECONDS = SESSION_DURATION_SECONDS
TOKEN_BYTES = 32  # 256 bits
MIN_SECRET_LENGTH = 32


class SessionPayload(BaseModel):
    """Client-held half of a session, signed into the cookie."""

    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)

    token: str = Field(min_length=1)
    user_id: uuid.UUID = Field(alias="userId")
    expires_at: int = Field(alias="expiresAt")  # epoch milliseconds

    @property
    def expires_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class IssuedSession:
    """A freshly minted session: raw token, Set-Cookie value and payload."""
    token: str
    cookie: str
    payload: SessionPayload


def hash_session_token(token: str) -> str:
    """Deterministic lookup key for a token (SHA-256 hex)."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


class SessionCodec:
    """
    Builds and reads signed session cookies.

    Attributes:
        secret: HMAC signing key (at least 32 characters)
        secure: Whether cookies carry the Secure attribute (production)
        clock: Callable returning current time in seconds (for testing)
    """

    def __init__(
        self,
        secret: str,
        secure: bool = False,
        clock: Callable[[], float] = time.time,
    ):
        if not secret or len(secret) < MIN_SECRET_LENGTH:
            raise ValueError(
                f"Session secret must be at least {MIN_SECRET_LENGTH} characters for HMAC signing"
            )
        self._key = secret.encode("utf-8")
        self.secure = secure
        self.clock = clock

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _sign(self, encoded: str) -> str:
        digest = hmac.new(self._key, encoded.encode("ascii"), hashlib.sha256).digest()
        return _b64url_encode(digest)

    def _serialize(self, value: str, max_age: int) -> str:
        cookie = SimpleCookie()
        cookie[SESSION_COOKIE_NAME] = value
        morsel = cookie[SESSION_COOKIE_NAME]
        morsel["path"] = "/"
        morsel["max-age"] = max_age
        morsel["httponly"] = True
        morsel["samesite"] = "Lax"
        if self.secure:
            morsel["secure"] = True
        return morsel.OutputString()

    def encode(self, payload: SessionPayload) -> str:
        """Signed cookie value (without attributes) for a payload."""
        encoded = _b64url_encode(payload.model_dump_json(by_alias=True).encode("utf-8"))
        return f"{encoded}.{self._sign(encoded)}"

    def issue(self, user_id: str) -> IssuedSession:
        """
        Mint a new session for a user.

        Returns:
            IssuedSession with the raw token (to hash and persist), the
            Set-Cookie header value and the payload.
        """
        payload = SessionPayload.model_validate(
            {
                "token": secrets.token_hex(TOKEN_BYTES),
                "userId": uuid.UUID(str(user_id)),
                "expiresAt": self._now_ms() + SESSION_DURATION_SECONDS * 1000,
            }
        )
        cookie = self._serialize(self.encode(payload), SESSION_MAX_AGE_SECONDS)
        return IssuedSession(token=payload.token, cookie=cookie, payload=payload)

    def destroy(self) -> str:
        """Set-Cookie header value instructing the client to drop the session."""
        return self._serialize("", 0)

    def decode(self, value: str) -> Optional[SessionPayload]:
        """
        Verify and decode a raw cookie value.

        Returns None for anything unsigned, tampered, malformed or expired.
        """
        encoded, _, signature = value.partition(".")
        if not encoded or not signature:
            return None
        if not (encoded.isascii() and signature.isascii()):
            return None

        expected = self._sign(encoded)
        if len(signature) != len(expected):
            return None
        if not hmac.compare_digest(signature.encode("ascii"), expected.encode("ascii")):
            return None

        try:
            payload = SessionPayload.model_validate_json(_b64url_decode(encoded))
        except (ValueError, ValidationError):
            _logger.warning("[AUTH] Signed session cookie carried an invalid payload")
            return None

        if self._now_ms() > payload.expires_at:
            return None

        return payload

    def read(self, cookie_header: Optional[str]) -> Optional[SessionPayload]:
        """
        Extract and verify the session cookie from a Cookie request header.

        Args:
            cookie_header: Raw Cookie header (may be None)

        Returns:
            SessionPayload if the cookie is authentic and unexpired, None otherwise
        """
        if not cookie_header:
            return None

        raw = cookie_parser(cookie_header).get(SESSION_COOKIE_NAME)
        if not raw:
            return None

        return self.decode(raw)
