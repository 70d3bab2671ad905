# auth/store.py
"""
SQL for users and sessions.

Every function takes an open connection so callers decide the transaction
boundary (session rotation deletes and inserts in one transaction).
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from auth.models import Session, User, normalize_email
from persistence.db import to_db_time


@dataclass(frozen=True)
class SessionWithUser:
    session: Session
    user: User


def find_user_by_email(conn: sqlite3.Connection, email: str) -> Optional[User]:
    row = conn.execute(
        "SELECT * FROM users WHERE email = ?",
        (normalize_email(email),),
    ).fetchone()
    return User.from_row(row) if row else None


def insert_user(conn: sqlite3.Connection, user: User) -> User:
    conn.execute(
        """
        INSERT INTO users (id, email, password_hash, display_name, is_owner, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (
            user.id,
            user.email,
            user.password_hash,
            user.display_name,
            int(user.is_owner),
            to_db_time(user.created_at),
            to_db_time(user.updated_at),
        ),
    )
    return user


def insert_session(conn: sqlite3.Connection, session: Session) -> Session:
    conn.execute(
        """
        INSERT INTO sessions (id, user_id, token_hash, created_at, expires_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (
            session.id,
            session.user_id,
            session.token_hash,
            to_db_time(session.created_at),
            to_db_time(session.expires_at),
        ),
    )
    return session


def find_active_session(
    conn: sqlite3.Connection,
    token_hash: str,
    user_id: str,
    now: datetime,
) -> Optional[SessionWithUser]:
    """
    Look up a live session row joined to its user.

    A row only matches when the token hash and the user id both agree and
    the stored expiry is still in the future.
    """
    row = conn.execute(
        """
        SELECT
            s.id AS s_id,
            s.user_id AS s_user_id,
            s.token_hash AS s_token_hash,
            s.created_at AS s_created_at,
            s.expires_at AS s_expires_at,
            u.*
        FROM sessions s
        JOIN users u ON u.id = s.user_id
        WHERE s.token_hash = ? AND s.user_id = ? AND s.expires_at > ?
        """,
        (token_hash, user_id, to_db_time(now)),
    ).fetchone()

    if not row:
        return None

    return SessionWithUser(
        session=Session.from_row(row, prefix="s_"),
        user=User.from_row(row),
    )


def delete_session(conn: sqlite3.Connection, session_id: str) -> bool:
    cursor = conn.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
    return cursor.rowcount > 0


def delete_session_by_token_hash(conn: sqlite3.Connection, token_hash: str) -> bool:
    cursor = conn.execute("DELETE FROM sessions WHERE token_hash = ?", (token_hash,))
    return cursor.rowcount > 0


def count_user_sessions(conn: sqlite3.Connection, user_id: str) -> int:
    row = conn.execute(
        "SELECT COUNT(*) AS n FROM sessions WHERE user_id = ?",
        (user_id,),
    ).fetchone()
    return row["n"]
