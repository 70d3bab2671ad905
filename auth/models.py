# auth/models.py
"""
User and Session models for authentication.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from persistence.db import from_db_time, utcnow


def normalize_email(email: str) -> str:
    """Emails are compared lower-cased and without surrounding whitespace."""
    return email.lower().strip()


@dataclass
class User:
    """
    User account model.

    Attributes:
        id: Unique user ID (UUID)
        email: User's email (unique, used for login)
        password_hash: Bcrypt-hashed password
        display_name: Name shown in the admin UI
        is_owner: Marks the studio owner account
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """
    id: str
    email: str
    password_hash: str
    display_name: Optional[str] = None
    is_owner: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def new(
        cls,
        email: str,
        password_hash: str,
        display_name: Optional[str] = None,
        is_owner: bool = True,
    ) -> User:
        """Create a new user with generated ID."""
        now = utcnow()
        return cls(
            id=str(uuid.uuid4()),
            email=normalize_email(email),
            password_hash=password_hash,
            display_name=display_name,
            is_owner=is_owner,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_row(cls, row) -> User:
        return cls(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            display_name=row["display_name"],
            is_owner=bool(row["is_owner"]),
            created_at=from_db_time(row["created_at"]),
            updated_at=from_db_time(row["updated_at"]),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary (excludes password_hash for safety)."""
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "is_owner": self.is_owner,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class Session:
    """
    Server-side record of one login.

    Only the SHA-256 hash of the bearer token is kept, never the token.

    Attributes:
        id: Unique session ID (UUID)
        user_id: Associated user ID
        token_hash: Hex digest of the session token
        created_at: Session creation timestamp
        expires_at: Absolute expiry
    """
    id: str
    user_id: str
    token_hash: str
    created_at: datetime
    expires_at: datetime

    @classmethod
    def new(cls, user_id: str, token_hash: str, expires_at: datetime) -> Session:
        """Create a new session with generated ID."""
        return cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            token_hash=token_hash,
            created_at=utcnow(),
            expires_at=expires_at,
        )

    @classmethod
    def from_row(cls, row, prefix: str = "") -> Session:
        return cls(
            id=row[f"{prefix}id"],
            user_id=row[f"{prefix}user_id"],
            token_hash=row[f"{prefix}token_hash"],
            created_at=from_db_time(row[f"{prefix}created_at"]),
            expires_at=from_db_time(row[f"{prefix}expires_at"]),
        )

    def is_valid_at(self, now: datetime) -> bool:
        return now < self.expires_at
