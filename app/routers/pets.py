# app/routers/pets.py
"""
Pet profile endpoints (owner only).
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from app.errors import NotFoundError
from app.rate_limiter import PET_CREATE_POLICY, RateLimiter
from auth.middleware import AdminContext, enforce_rate_limit, get_database, get_rate_limiter, require_admin_context
from content import pets
from persistence.db import Database

router = APIRouter(prefix="/api/pets", tags=["pets"])

PET_NOT_FOUND = "Pet not found"


@router.get("")
async def list_pets(
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    return {"pets": [pet.to_dict() for pet in pets.list_pets(db, admin.user_id)]}


@router.post("", status_code=201)
async def create_pet(
    body: dict[str, Any] = Body(...),
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    enforce_rate_limit(limiter, f"pets:create:{admin.user_id}", PET_CREATE_POLICY)
    pet = pets.create_pet(db, admin.user_id, body)
    return {"pet": pet.to_dict()}


@router.get("/{pet_id}")
async def get_pet(
    pet_id: str,
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    pet = pets.get_pet(db, admin.user_id, pet_id)
    if pet is None:
        raise NotFoundError(PET_NOT_FOUND)
    return {"pet": pet.to_dict()}


@router.patch("/{pet_id}")
async def update_pet(
    pet_id: str,
    body: dict[str, Any] = Body(...),
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    pet = pets.update_pet(db, admin.user_id, pet_id, body)
    if pet is None:
        raise NotFoundError(PET_NOT_FOUND)
    return {"pet": pet.to_dict()}


@router.delete("/{pet_id}", status_code=204)
async def delete_pet(
    pet_id: str,
    admin: AdminContext = Depends(require_admin_context),
    db: Database = Depends(get_database),
):
    if not pets.delete_pet(db, admin.user_id, pet_id):
        raise NotFoundError(PET_NOT_FOUND)
    return Response(status_code=204)
