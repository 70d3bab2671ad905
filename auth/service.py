# auth/service.py
"""
Authentication service.

Handles:
- Owner bootstrap
- Credential verification
- Session issuance, lookup, rotation and revocation

A session is accepted only when the cookie signature verifies, the payload
has not expired, and a matching unexpired row exists for the token hash and
user id. The last check is what makes logout and rotation effective.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator

from auth import store
from auth.models import Session, User, normalize_email
from auth.password import (
    MAX_PASSWORD_BYTES,
    MIN_PASSWORD_LENGTH,
    burn_verification,
    hash_password,
    password_too_long,
    verify_password,
)
from auth.session import SessionCodec, SessionPayload, hash_session_token
from persistence.db import Database

_logger = logging.getLogger(__name__)


class Credentials(BaseModel):
    """Login request shape."""

    email: EmailStr
    password: str = Field(
        min_length=MIN_PASSWORD_LENGTH,
        description=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
    )

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, value: str) -> str:
        if password_too_long(value):
            raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
        return value


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful login or rotation."""
    user: User
    cookie: str
    payload: SessionPayload


@dataclass(frozen=True)
class ActiveSession:
    """A verified, live session and the user it belongs to."""
    user: User
    session: Session
    payload: SessionPayload


class AuthService:
    """
    Orchestrates credentials, session cookies and session rows.

    Attributes:
        db: Relational store holding users and sessions
        codec: Signs and verifies session cookies
        clock: Callable returning current time in seconds (defaults to the codec's)
    """

    def __init__(
        self,
        db: Database,
        codec: SessionCodec,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.db = db
        self.codec = codec
        self.clock = clock or codec.clock

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self.clock(), tz=timezone.utc)

    def ensure_owner_exists(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> User:
        """
        Create the owner account unless the email is already registered.

        Idempotent: an existing account is returned untouched, its password
        is never overwritten.

        Raises:
            ValueError: If the email or password would be refused at login
        """
        try:
            creds = Credentials.model_validate({"email": email, "password": password})
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors())
            raise ValueError(f"Owner credentials would be refused at login: {fields}") from e

        email = normalize_email(creds.email)

        with self.db.transaction() as conn:
            existing = store.find_user_by_email(conn, email)
            if existing:
                _logger.info(f"Owner account already present: {email}")
                return existing

            user = User.new(
                email=email,
                password_hash=hash_password(password),
                display_name=display_name,
                is_owner=True,
            )
            store.insert_user(conn, user)

        _logger.info(f"Created owner account: {email}")
        return user

    def authenticate(
        self,
        credentials: Union[Credentials, Mapping[str, Any]],
    ) -> Optional[AuthResult]:
        """
        Verify credentials and open a new session.

        Malformed input, an unknown email and a wrong password all return
        None so callers cannot tell them apart.
        """
        try:
            creds = Credentials.model_validate(credentials)
        except ValidationError:
            _logger.info("[AUTH] Login rejected: malformed credentials")
            return None

        with self.db.transaction() as conn:
            user = store.find_user_by_email(conn, creds.email)

        if user is None:
            burn_verification(creds.password)
            _logger.warning(f"[AUTH] Login attempt for unknown email: {normalize_email(creds.email)}")
            return None

        if not verify_password(creds.password, user.password_hash):
            _logger.warning(f"[AUTH] Invalid password for user: {user.email}")
            return None

        with self.db.transaction() as conn:
            result = self._start_session(conn, user)

        _logger.info(f"[AUTH] User authenticated: {user.email}")
        return result

    def _start_session(self, conn, user: User) -> AuthResult:
        issued = self.codec.issue(user.id)
        store.insert_session(
            conn,
            Session.new(
                user_id=user.id,
                token_hash=hash_session_token(issued.token),
                expires_at=issued.payload.expires_at_datetime,
            ),
        )
        return AuthResult(user=user, cookie=issued.cookie, payload=issued.payload)

    def require_session(self, cookie_header: Optional[str]) -> Optional[ActiveSession]:
        """
        The single authorization gate for protected operations.

        Args:
            cookie_header: Raw Cookie request header

        Returns:
            ActiveSession if the cookie is authentic and its row is live, None otherwise
        """
        payload = self.codec.read(cookie_header)
        if payload is None:
            return None

        with self.db.transaction() as conn:
            found = store.find_active_session(
                conn,
                token_hash=hash_session_token(payload.token),
                user_id=str(payload.user_id),
                now=self._now(),
            )

        if found is None:
            _logger.info(f"[AUTH] Signed cookie without live session for user: {payload.user_id}")
            return None

        return ActiveSession(user=found.user, session=found.session, payload=payload)

    def rotate_session(self, cookie_header: Optional[str]) -> Optional[AuthResult]:
        """
        Replace the caller's session with a brand-new one.

        The old row is deleted and the new one inserted in a single
        transaction, so a failure leaves the original session in place.
        """
        with self.db.transaction() as conn:
            active = self.require_session(cookie_header)
            if active is None:
                return None

            store.delete_session(conn, active.session.id)
            result = self._start_session(conn, active.user)

        _logger.info(f"[AUTH] Session rotated for user: {active.user.email}")
        return result

    def sign_out(self, cookie_header: Optional[str]) -> str:
        """
        Best-effort logout.

        Deletes the session row if the cookie decodes and always returns the
        Set-Cookie value that clears the cookie, so logout never fails.
        """
        payload = self.codec.read(cookie_header)
        if payload is not None:
            with self.db.transaction() as conn:
                store.delete_session_by_token_hash(conn, hash_session_token(payload.token))
            _logger.info(f"[AUTH] Signed out user: {payload.user_id}")

        return self.codec.destroy()

    def revoke_session(self, token: str) -> bool:
        """
        Delete one session by its raw token.

        Returns:
            True if a row was removed, False if none matched
        """
        with self.db.transaction() as conn:
            return store.delete_session_by_token_hash(conn, hash_session_token(token))


def build_auth_service(
    db: Database,
    secret: str,
    secure: bool = False,
    clock: Callable[[], float] = time.time,
) -> AuthService:
    """Wire a codec and service around an existing database."""
    return AuthService(db=db, codec=SessionCodec(secret=secret, secure=secure, clock=clock))
