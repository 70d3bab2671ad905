# content/themes.py
"""Memorial page themes (shared across owners)."""

from __future__ import annotations

import uuid
from typing import Any, Mapping

from content.models import Theme
from content.schemas import CreateThemeInput
from persistence.db import Database, to_db_time, utcnow


def list_themes(db: Database) -> list[Theme]:
    with db.transaction() as conn:
        rows = conn.execute("SELECT * FROM themes ORDER BY name ASC").fetchall()
    return [Theme.from_row(row) for row in rows]


def create_theme(db: Database, data: Mapping[str, Any]) -> Theme:
    payload = CreateThemeInput.model_validate(data)
    now = utcnow()
    theme = Theme(id=str(uuid.uuid4()), created_at=now, updated_at=now, **payload.model_dump())

    with db.transaction() as conn:
        conn.execute(
            """
            INSERT INTO themes (id, name, description, primary_color, secondary_color,
                                accent_color, background_color, heading_font, body_font,
                                created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                theme.id,
                theme.name,
                theme.description,
                theme.primary_color,
                theme.secondary_color,
                theme.accent_color,
                theme.background_color,
                theme.heading_font,
                theme.body_font,
                to_db_time(theme.created_at),
                to_db_time(theme.updated_at),
            ),
        )
    return theme


def theme_exists(conn, theme_id: str) -> bool:
    row = conn.execute("SELECT 1 FROM themes WHERE id = ?", (theme_id,)).fetchone()
    return row is not None
