# content/memorials.py
"""
Memorial page authoring and publishing.

Handles:
- Creation against a pet the owner actually owns
- Unique slugs derived from titles
- Draft/published status with published_at bookkeeping
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from typing import Any, Mapping, Optional

from app.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from content.media import media_for_memorial
from content.models import MemorialPage, Pet, Theme
from content.schemas import CreateMemorialInput, PublishMemorialInput, UpdateMemorialInput
from content.slug import unique_slug
from content.themes import theme_exists
from persistence.db import Database, to_db_time, utcnow

_logger = logging.getLogger(__name__)

MEMORIAL_SELECT = """
    SELECT
        m.*,
        p.id AS p_id, p.owner_id AS p_owner_id, p.name AS p_name,
        p.species AS p_species, p.breed AS p_breed, p.birth_date AS p_birth_date,
        p.passing_date AS p_passing_date, p.memorialized AS p_memorialized,
        p.created_at AS p_created_at, p.updated_at AS p_updated_at,
        t.id AS t_id, t.name AS t_name, t.description AS t_description,
        t.primary_color AS t_primary_color, t.secondary_color AS t_secondary_color,
        t.accent_color AS t_accent_color, t.background_color AS t_background_color,
        t.heading_font AS t_heading_font, t.body_font AS t_body_font,
        t.created_at AS t_created_at, t.updated_at AS t_updated_at
    FROM memorial_pages m
    JOIN pets p ON p.id = m.pet_id
    LEFT JOIN themes t ON t.id = m.theme_id
"""


def memorial_from_row(row) -> MemorialPage:
    memorial = MemorialPage.from_row(row)
    memorial.pet = Pet.from_row(row, prefix="p_")
    memorial.theme = Theme.from_row(row, prefix="t_") if row["t_id"] else None
    return memorial


def _resolve_slug(conn, title: str, exclude_id: Optional[str] = None) -> str:
    def is_taken(candidate: str) -> bool:
        row = conn.execute(
            "SELECT id FROM memorial_pages WHERE slug = ?",
            (candidate,),
        ).fetchone()
        return row is not None and row["id"] != exclude_id

    return unique_slug(title, is_taken)


def _execute_write(conn, sql: str, params: tuple) -> None:
    try:
        conn.execute(sql, params)
    except sqlite3.IntegrityError as e:
        if "memorial_pages.slug" in str(e):
            raise ConflictError("Slug already in use") from e
        raise


def _ensure_owner_owns_pet(conn, owner_id: str, pet_id: str) -> None:
    row = conn.execute(
        "SELECT 1 FROM pets WHERE id = ? AND owner_id = ?",
        (pet_id, owner_id),
    ).fetchone()
    if row is None:
        raise ForbiddenError("Pet does not belong to the current owner")


def _ensure_theme(conn, theme_id: Optional[str]) -> None:
    if theme_id is not None and not theme_exists(conn, theme_id):
        raise BadRequestError("Theme not found")


def _ensure_memorial(conn, owner_id: str, memorial_id: str) -> MemorialPage:
    row = conn.execute(
        f"{MEMORIAL_SELECT} WHERE m.id = ? AND p.owner_id = ?",
        (memorial_id, owner_id),
    ).fetchone()
    if row is None:
        raise NotFoundError("Memorial not found")
    return memorial_from_row(row)


def list_memorials(db: Database, owner_id: str) -> list[MemorialPage]:
    """The owner's memorial pages, most recently updated first."""
    with db.transaction() as conn:
        rows = conn.execute(
            f"{MEMORIAL_SELECT} WHERE p.owner_id = ? ORDER BY m.updated_at DESC",
            (owner_id,),
        ).fetchall()
    return [memorial_from_row(row) for row in rows]


def get_memorial(db: Database, owner_id: str, memorial_id: str) -> MemorialPage:
    """
    Raises:
        NotFoundError: If the memorial doesn't exist or belongs to another owner
    """
    with db.transaction() as conn:
        memorial = _ensure_memorial(conn, owner_id, memorial_id)
        memorial.media = media_for_memorial(conn, memorial_id)
    return memorial


def create_memorial(db: Database, owner_id: str, data: Mapping[str, Any]) -> MemorialPage:
    """
    Create a memorial page for one of the owner's pets.

    Raises:
        ForbiddenError: If the pet belongs to someone else (or doesn't exist)
        BadRequestError: If theme_id names no theme
    """
    payload = CreateMemorialInput.model_validate(data)
    pet_id = str(payload.pet_id)
    theme_id = str(payload.theme_id) if payload.theme_id else None
    now = utcnow()

    with db.transaction() as conn:
        _ensure_owner_owns_pet(conn, owner_id, pet_id)
        _ensure_theme(conn, theme_id)

        memorial = MemorialPage(
            id=str(uuid.uuid4()),
            pet_id=pet_id,
            theme_id=theme_id,
            title=payload.title,
            subtitle=payload.subtitle,
            slug=_resolve_slug(conn, payload.title),
            summary=payload.summary,
            story=payload.story,
            status=payload.status,
            published_at=now if payload.status == "published" else None,
            created_at=now,
            updated_at=now,
        )
        _execute_write(
            conn,
            """
            INSERT INTO memorial_pages (id, pet_id, theme_id, title, subtitle, slug, summary,
                                        story, status, published_at, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                memorial.id,
                memorial.pet_id,
                memorial.theme_id,
                memorial.title,
                memorial.subtitle,
                memorial.slug,
                memorial.summary,
                memorial.story,
                memorial.status,
                to_db_time(memorial.published_at),
                to_db_time(memorial.created_at),
                to_db_time(memorial.updated_at),
            ),
        )
        memorial = _ensure_memorial(conn, owner_id, memorial.id)

    _logger.info(f"Created memorial {memorial.slug} for pet {pet_id}")
    return memorial


def update_memorial(
    db: Database, owner_id: str, memorial_id: str, data: Mapping[str, Any]
) -> MemorialPage:
    """
    Apply a partial update.

    A new title re-derives the slug. Moving to draft clears published_at;
    moving to published stamps it unless it is already set.
    """
    changes = UpdateMemorialInput.model_validate(data).changes()

    with db.transaction() as conn:
        existing = _ensure_memorial(conn, owner_id, memorial_id)

        columns: dict[str, Any] = {}
        if "theme_id" in changes:
            theme_id = str(changes["theme_id"]) if changes["theme_id"] else None
            _ensure_theme(conn, theme_id)
            columns["theme_id"] = theme_id
        if "title" in changes:
            columns["title"] = changes["title"]
            columns["slug"] = _resolve_slug(conn, changes["title"], exclude_id=memorial_id)
        for name in ("subtitle", "summary", "story"):
            if name in changes:
                columns[name] = changes[name]
        if "status" in changes:
            columns["status"] = changes["status"]
            if changes["status"] == "draft":
                columns["published_at"] = None
            elif existing.published_at is None:
                columns["published_at"] = to_db_time(utcnow())
        columns["updated_at"] = to_db_time(utcnow())

        assignments = ", ".join(f"{name} = ?" for name in columns)
        _execute_write(
            conn,
            f"UPDATE memorial_pages SET {assignments} WHERE id = ?",
            (*columns.values(), memorial_id),
        )
        return _ensure_memorial(conn, owner_id, memorial_id)


def publish_memorial(
    db: Database, owner_id: str, memorial_id: str, data: Mapping[str, Any]
) -> MemorialPage:
    """
    Publish (optionally at a scheduled time) or unpublish a memorial.
    """
    payload = PublishMemorialInput.model_validate(data)
    now = utcnow()

    with db.transaction() as conn:
        _ensure_memorial(conn, owner_id, memorial_id)

        if payload.publish:
            published_at = payload.scheduled_at or now
            conn.execute(
                """
                UPDATE memorial_pages
                SET status = 'published', published_at = ?, updated_at = ?
                WHERE id = ?
                """,
                (to_db_time(published_at), to_db_time(now), memorial_id),
            )
        else:
            conn.execute(
                """
                UPDATE memorial_pages
                SET status = 'draft', published_at = NULL, updated_at = ?
                WHERE id = ?
                """,
                (to_db_time(now), memorial_id),
            )

        memorial = _ensure_memorial(conn, owner_id, memorial_id)

    _logger.info(f"Memorial {memorial.slug} is now {memorial.status}")
    return memorial
