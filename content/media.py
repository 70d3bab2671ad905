# content/media.py
"""
Media attached to memorial pages.

Only metadata lives here: each asset references a stored file by key and
carries a sort_order that fixes its position on the page. New assets go
to the end; reordering rewrites sort_order for the listed ids.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping

from app.errors import NotFoundError
from content.models import MediaAsset
from content.schemas import CreateMediaInput, ReorderMediaInput
from persistence.db import Database, to_db_time, utcnow

_logger = logging.getLogger(__name__)

MEDIA_NOT_FOUND = "Media asset not found"


def media_for_memorial(conn, memorial_id: str) -> list[MediaAsset]:
    rows = conn.execute(
        "SELECT * FROM media_assets WHERE memorial_id = ? ORDER BY sort_order ASC, created_at ASC",
        (memorial_id,),
    ).fetchall()
    return [MediaAsset.from_row(row) for row in rows]


def _ensure_owner_owns_memorial(conn, owner_id: str, memorial_id: str) -> None:
    row = conn.execute(
        """
        SELECT 1 FROM memorial_pages m
        JOIN pets p ON p.id = m.pet_id
        WHERE m.id = ? AND p.owner_id = ?
        """,
        (memorial_id, owner_id),
    ).fetchone()
    if row is None:
        raise NotFoundError("Memorial not found")


def list_media(db: Database, owner_id: str, memorial_id: str) -> list[MediaAsset]:
    with db.transaction() as conn:
        _ensure_owner_owns_memorial(conn, owner_id, memorial_id)
        return media_for_memorial(conn, memorial_id)


def add_media(db: Database, owner_id: str, memorial_id: str, data: Mapping[str, Any]) -> MediaAsset:
    """
    Attach a media asset after the memorial's existing ones.

    Raises:
        NotFoundError: If the memorial doesn't exist or belongs to another owner
    """
    payload = CreateMediaInput.model_validate(data)

    with db.transaction() as conn:
        _ensure_owner_owns_memorial(conn, owner_id, memorial_id)

        current_max = conn.execute(
            "SELECT MAX(sort_order) FROM media_assets WHERE memorial_id = ?",
            (memorial_id,),
        ).fetchone()[0]

        asset = MediaAsset(
            id=str(uuid.uuid4()),
            memorial_id=memorial_id,
            title=payload.title,
            alt_text=payload.alt_text,
            caption=payload.caption,
            media_type=payload.media_type,
            file_key=payload.file_key,
            sort_order=(current_max or 0) + 1,
            created_at=utcnow(),
        )
        conn.execute(
            """
            INSERT INTO media_assets (id, memorial_id, title, alt_text, caption,
                                      media_type, file_key, sort_order, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                asset.id,
                asset.memorial_id,
                asset.title,
                asset.alt_text,
                asset.caption,
                asset.media_type,
                asset.file_key,
                asset.sort_order,
                to_db_time(asset.created_at),
            ),
        )

    _logger.info(f"Attached {asset.media_type} {asset.file_key} to memorial {memorial_id}")
    return asset


def reorder_media(
    db: Database, owner_id: str, memorial_id: str, data: Mapping[str, Any]
) -> list[MediaAsset]:
    """
    Set sort_order for the listed assets and return the new order.

    Ids that belong to a different memorial are ignored.
    """
    payload = ReorderMediaInput.model_validate(data)

    with db.transaction() as conn:
        _ensure_owner_owns_memorial(conn, owner_id, memorial_id)
        for item in payload.items:
            conn.execute(
                "UPDATE media_assets SET sort_order = ? WHERE id = ? AND memorial_id = ?",
                (item.sort_order, str(item.id), memorial_id),
            )
        return media_for_memorial(conn, memorial_id)


def remove_media(db: Database, owner_id: str, media_id: str) -> None:
    """
    Raises:
        NotFoundError: If the asset doesn't exist or belongs to another owner
    """
    with db.transaction() as conn:
        row = conn.execute(
            """
            SELECT a.file_key FROM media_assets a
            JOIN memorial_pages m ON m.id = a.memorial_id
            JOIN pets p ON p.id = m.pet_id
            WHERE a.id = ? AND p.owner_id = ?
            """,
            (media_id, owner_id),
        ).fetchone()
        if row is None:
            raise NotFoundError(MEDIA_NOT_FOUND)

        conn.execute("DELETE FROM media_assets WHERE id = ?", (media_id,))

    _logger.info(f"Removed media {row['file_key']}")
