# app/routers/themes.py
"""
Theme endpoints (owner only).
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from auth.middleware import AdminContext, get_database, require_admin_context
from content import themes
from persistence.db import Database

router = APIRouter(prefix="/api/themes", tags=["themes"])


@router.get("")
async def list_themes(
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    return {"themes": [theme.to_dict() for theme in themes.list_themes(db)]}


@router.post("", status_code=201)
async def create_theme(
    body: dict[str, Any] = Body(...),
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    return {"theme": themes.create_theme(db, body).to_dict()}
