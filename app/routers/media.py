# app/routers/media.py
"""
Memorial media endpoints (owner only).
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from auth.middleware import AdminContext, get_database, require_admin_context
from content import media
from persistence.db import Database

router = APIRouter(tags=["media"])


@router.get("/api/memorials/{memorial_id}/media")
async def list_media(
    memorial_id: str,
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    assets = media.list_media(db, admin.user_id, memorial_id)
    return {"media": [asset.to_dict() for asset in assets]}


@router.post("/api/memorials/{memorial_id}/media", status_code=201)
async def add_media(
    memorial_id: str,
    body: dict[str, Any] = Body(...),
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    asset = media.add_media(db, admin.user_id, memorial_id, body)
    return {"asset": asset.to_dict()}


@router.patch("/api/memorials/{memorial_id}/media", status_code=204)
async def reorder_media(
    memorial_id: str,
    body: dict[str, Any] = Body(...),
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    media.reorder_media(db, admin.user_id, memorial_id, body)
    return Response(status_code=204)


@router.delete("/api/media/{media_id}", status_code=204)
async def remove_media(
    media_id: str,
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    media.remove_media(db, admin.user_id, media_id)
    return Response(status_code=204)
