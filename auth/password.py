# auth/password.py
"""
Secure password hashing using bcrypt.

Bcrypt is designed for password hashing with:
- Automatic salt generation
- Configurable work factor (cost)
- Resistance to rainbow tables
"""

from __future__ import annotations

import logging
from functools import lru_cache

import bcrypt

_logger = logging.getLogger(__name__)

# Work factor (cost) - higher = slower but more secure
BCRYPT_ROUNDS = 12

# Minimum length accepted at login and bootstrap
MIN_PASSWORD_LENGTH = 12

# bcrypt refuses input longer than this
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


@lru_cache(maxsize=1)
def _dummy_hash() -> bytes:
    # Verified against when no user matches, so both failure paths cost one bcrypt check
    return bcrypt.hashpw(b"fourpaws-dummy-password", bcrypt.gensalt(rounds=BCRYPT_ROUNDS))


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash string (includes salt)
    """
    if not password:
        raise ValueError("Password cannot be empty")
    if password_too_long(password):
        raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")

    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password_bytes, salt)

    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its hash.

    Args:
        password: Plain text password to verify
        password_hash: Stored bcrypt hash

    Returns:
        True if password matches, False otherwise
    """
    if not password or not password_hash or password_too_long(password):
        return False

    try:
        password_bytes = password.encode("utf-8")
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(password_bytes, hash_bytes)
    except ValueError as e:
        _logger.warning(f"Password verification error: {e}")
        return False


def burn_verification(password: str) -> None:
    """Spend one bcrypt verification when there is no stored hash to check."""
    candidate = (password or "-").encode("utf-8")[:MAX_PASSWORD_BYTES]
    bcrypt.checkpw(candidate, _dummy_hash())
