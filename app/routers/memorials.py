# app/routers/memorials.py
"""
Memorial page endpoints (owner only).
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from app.rate_limiter import MEMORIAL_CREATE_POLICY, RateLimiter
from auth.middleware import AdminContext, enforce_rate_limit, get_database, get_rate_limiter, require_admin_context
from content import memorials
from persistence.db import Database

router = APIRouter(prefix="/api/memorials", tags=["memorials"])


@router.get("")
async def list_memorials(
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    return {"memorials": [m.to_dict() for m in memorials.list_memorials(db, admin.user_id)]}


@router.post("", status_code=201)
async def create_memorial(
    body: dict[str, Any] = Body(...),
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    enforce_rate_limit(limiter, f"memorials:create:{admin.user_id}", MEMORIAL_CREATE_POLICY)
    memorial = memorials.create_memorial(db, admin.user_id, body)
    return {"memorial": memorial.to_dict()}


@router.get("/{memorial_id}")
async def get_memorial(
    memorial_id: str,
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    return {"memorial": memorials.get_memorial(db, admin.user_id, memorial_id).to_dict()}


@router.patch("/{memorial_id}")
async def update_memorial(
    memorial_id: str,
    body: dict[str, Any] = Body(...),
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    memorial = memorials.update_memorial(db, admin.user_id, memorial_id, body)
    return {"memorial": memorial.to_dict()}


@router.post("/{memorial_id}/publish")
async def publish_memorial(
    memorial_id: str,
    body: dict[str, Any] = Body(...),
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    memorial = memorials.publish_memorial(db, admin.user_id, memorial_id, body)
    return {"memorial": memorial.to_dict()}
