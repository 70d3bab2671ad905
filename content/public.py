# content/public.py
"""Read-only access to published memorials for the public gallery."""

from __future__ import annotations

from app.errors import NotFoundError
from content.media import media_for_memorial
from content.memorials import MEMORIAL_SELECT, memorial_from_row
from content.models import MemorialPage
from persistence.db import Database


def list_published_memorials(db: Database) -> list[MemorialPage]:
    """Every published page, most recently published first."""
    with db.transaction() as conn:
        rows = conn.execute(
            f"{MEMORIAL_SELECT} WHERE m.status = 'published' ORDER BY m.published_at DESC",
        ).fetchall()
    return [memorial_from_row(row) for row in rows]


def get_published_memorial(db: Database, slug: str) -> MemorialPage:
    """
    A published page by slug, with pet, theme and ordered media.

    Drafts are reported exactly like missing pages.
    """
    with db.transaction() as conn:
        row = conn.execute(
            f"{MEMORIAL_SELECT} WHERE m.slug = ? AND m.status = 'published'",
            (slug,),
        ).fetchone()
        if row is None:
            raise NotFoundError("Memorial not found")

        memorial = memorial_from_row(row)
        memorial.media = media_for_memorial(conn, memorial.id)
    return memorial
