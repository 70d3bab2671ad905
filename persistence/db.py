# persistence/db.py
"""
SQLite database connection and schema management.

The database is an explicitly constructed object: the app factory creates
one at startup and closes it at shutdown, tests build their own in-memory
instances.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Union

_logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        display_name TEXT,
        is_owner INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sessions (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        token_hash TEXT NOT NULL,
        created_at TEXT NOT NULL,
        expires_at TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_sessions_token_hash
    ON sessions(token_hash)
    """,
    """
    CREATE TABLE IF NOT EXISTS themes (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        primary_color TEXT NOT NULL DEFAULT '#1d4ed8',
        secondary_color TEXT NOT NULL DEFAULT '#f97316',
        accent_color TEXT NOT NULL DEFAULT '#10b981',
        background_color TEXT NOT NULL DEFAULT '#ffffff',
        heading_font TEXT NOT NULL DEFAULT 'Playfair Display',
        body_font TEXT NOT NULL DEFAULT 'Inter',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS pets (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL,
        name TEXT NOT NULL,
        species TEXT NOT NULL,
        breed TEXT,
        birth_date TEXT,
        passing_date TEXT,
        memorialized INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (owner_id) REFERENCES users(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_pets_owner
    ON pets(owner_id, created_at)
    """,
    """
    CREATE TABLE IF NOT EXISTS memorial_pages (
        id TEXT PRIMARY KEY,
        pet_id TEXT NOT NULL,
        theme_id TEXT,
        title TEXT NOT NULL,
        subtitle TEXT,
        slug TEXT NOT NULL UNIQUE,
        summary TEXT,
        story TEXT,
        status TEXT NOT NULL DEFAULT 'draft'
            CHECK (status IN ('draft', 'published')),
        published_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (pet_id) REFERENCES pets(id) ON DELETE CASCADE,
        FOREIGN KEY (theme_id) REFERENCES themes(id) ON DELETE SET NULL
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_memorial_pages_pet
    ON memorial_pages(pet_id)
    """,
    """
    CREATE TABLE IF NOT EXISTS media_assets (
        id TEXT PRIMARY KEY,
        memorial_id TEXT NOT NULL,
        title TEXT,
        alt_text TEXT,
        caption TEXT,
        media_type TEXT NOT NULL DEFAULT 'image'
            CHECK (media_type IN ('image', 'video')),
        file_key TEXT NOT NULL,
        sort_order INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        FOREIGN KEY (memorial_id) REFERENCES memorial_pages(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_media_assets_memorial
    ON media_assets(memorial_id, sort_order)
    """,
)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_db_time(value: Optional[datetime]) -> Optional[str]:
    """
    Serialize a datetime for storage.

    Always UTC with microseconds so stored values compare correctly as text.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_db_time(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp back into an aware datetime."""
    if not value:
        return None
    return datetime.fromisoformat(value)


class Database:
    """
    A single SQLite connection shared by the whole process.

    All access goes through transaction(), which serialises callers with a
    re-entrant lock so nested service calls can share one transaction.
    """

    def __init__(self, path: Union[str, Path] = MEMORY_PATH):
        self.path = str(path)
        if self.path != MEMORY_PATH:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.RLock()
        self._depth = 0
        self._conn: Optional[sqlite3.Connection] = sqlite3.connect(
            self.path,
            timeout=30.0,
            check_same_thread=False,
        )
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._conn.row_factory = sqlite3.Row

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database is closed")
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Run a block of statements atomically.

        Usage:
            with db.transaction() as conn:
                conn.execute("DELETE ...")
                conn.execute("INSERT ...")

        Nested calls join the outermost transaction; only the outermost
        block commits or rolls back.
        """
        with self._lock:
            conn = self.connection
            self._depth += 1
            try:
                yield conn
            except Exception:
                if self._depth == 1:
                    conn.rollback()
                raise
            else:
                if self._depth == 1:
                    conn.commit()
            finally:
                self._depth -= 1

    def init_schema(self) -> None:
        """
        Create tables if they don't exist.

        Safe to call multiple times (idempotent).
        """
        with self.transaction() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)
        _logger.info(f"Database initialized at {self.path}")

    def table_names(self) -> list[str]:
        with self.transaction() as conn:
            rows = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
            ).fetchall()
        return [row["name"] for row in rows]

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                _logger.info(f"Database closed at {self.path}")
