# content/pets.py
"""
Pet profile CRUD.

Every query is scoped by owner_id, so a pet belonging to someone else
behaves exactly like a pet that does not exist.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Optional

from content.models import MemorialPage, Pet
from content.schemas import CreatePetInput, UpdatePetInput
from persistence.db import Database, to_db_time, utcnow

_logger = logging.getLogger(__name__)

_DATE_FIELDS = ("birth_date", "passing_date")


def list_pets(db: Database, owner_id: str) -> list[Pet]:
    """All of an owner's pets, oldest first."""
    with db.transaction() as conn:
        rows = conn.execute(
            "SELECT * FROM pets WHERE owner_id = ? ORDER BY created_at ASC",
            (owner_id,),
        ).fetchall()
    return [Pet.from_row(row) for row in rows]


def get_pet(db: Database, owner_id: str, pet_id: str) -> Optional[Pet]:
    """One pet with its memorial pages, or None if not found for this owner."""
    with db.transaction() as conn:
        row = conn.execute(
            "SELECT * FROM pets WHERE id = ? AND owner_id = ?",
            (pet_id, owner_id),
        ).fetchone()
        if not row:
            return None

        page_rows = conn.execute(
            "SELECT * FROM memorial_pages WHERE pet_id = ? ORDER BY created_at ASC",
            (pet_id,),
        ).fetchall()

    pet = Pet.from_row(row)
    pet.memorial_pages = [MemorialPage.from_row(page) for page in page_rows]
    return pet


def create_pet(db: Database, owner_id: str, data: Mapping[str, Any]) -> Pet:
    """
    Validate and insert a new pet.

    Raises:
        pydantic.ValidationError: If the payload is invalid
    """
    payload = CreatePetInput.model_validate(data)
    now = utcnow()
    pet = Pet(
        id=str(uuid.uuid4()),
        owner_id=owner_id,
        name=payload.name,
        species=payload.species,
        breed=payload.breed,
        birth_date=payload.birth_date,
        passing_date=payload.passing_date,
        memorialized=payload.memorialized,
        created_at=now,
        updated_at=now,
    )

    with db.transaction() as conn:
        conn.execute(
            """
            INSERT INTO pets (id, owner_id, name, species, breed, birth_date,
                              passing_date, memorialized, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                pet.id,
                pet.owner_id,
                pet.name,
                pet.species,
                pet.breed,
                to_db_time(pet.birth_date),
                to_db_time(pet.passing_date),
                int(pet.memorialized),
                to_db_time(pet.created_at),
                to_db_time(pet.updated_at),
            ),
        )

    _logger.info(f"Created pet {pet.id} for owner {owner_id}")
    return pet


def update_pet(
    db: Database, owner_id: str, pet_id: str, data: Mapping[str, Any]
) -> Optional[Pet]:
    """
    Apply a partial update.

    Returns:
        The updated pet, or None if not found for this owner
    """
    changes = UpdatePetInput.model_validate(data).changes()

    columns = {}
    for name, value in changes.items():
        if name in _DATE_FIELDS:
            columns[name] = to_db_time(value)
        elif name == "memorialized":
            columns[name] = int(value)
        else:
            columns[name] = value
    columns["updated_at"] = to_db_time(utcnow())

    assignments = ", ".join(f"{name} = ?" for name in columns)
    with db.transaction() as conn:
        cursor = conn.execute(
            f"UPDATE pets SET {assignments} WHERE id = ? AND owner_id = ?",
            (*columns.values(), pet_id, owner_id),
        )
        if cursor.rowcount == 0:
            return None
        row = conn.execute("SELECT * FROM pets WHERE id = ?", (pet_id,)).fetchone()

    return Pet.from_row(row)


def delete_pet(db: Database, owner_id: str, pet_id: str) -> bool:
    """
    Delete a pet (memorial pages cascade).

    Returns:
        True if deleted, False if not found for this owner
    """
    with db.transaction() as conn:
        cursor = conn.execute(
            "DELETE FROM pets WHERE id = ? AND owner_id = ?",
            (pet_id, owner_id),
        )
        deleted = cursor.rowcount > 0

    if deleted:
        _logger.info(f"Deleted pet {pet_id} for owner {owner_id}")
    return deleted
