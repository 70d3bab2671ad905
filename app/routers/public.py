# app/routers/public.py
"""
Public gallery endpoints. No session required; only published pages are visible.
"""

from fastapi import APIRouter, Depends

from auth.middleware import get_database
from content import public
from persistence.db import Database

router = APIRouter(prefix="/api/public/memorials", tags=["public"])


@router.get("")
async def list_published(db: Database = Depends(get_database)):
    return {"memorials": [m.to_public_summary() for m in public.list_published_memorials(db)]}


@router.get("/{slug}")
async def get_published(slug: str, db: Database = Depends(get_database)):
    return {"memorial": public.get_published_memorial(db, slug).to_public_dict()}
