# content/models.py
"""
Pet, theme and memorial page records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from persistence.db import from_db_time


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Pet:
    """
    A pet profile owned by one user.

    Attributes:
        id: Unique pet ID (UUID)
        owner_id: Owning user ID
        name: Pet's name
        species: e.g. "dog", "cat"
        breed: Optional breed
        birth_date: Optional date of birth
        passing_date: Optional date of passing
        memorialized: Whether the pet has a memorial
        memorial_pages: Populated only by detail lookups
    """
    id: str
    owner_id: str
    name: str
    species: str
    breed: Optional[str]
    birth_date: Optional[datetime]
    passing_date: Optional[datetime]
    memorialized: bool
    created_at: datetime
    updated_at: datetime
    memorial_pages: Optional[list[MemorialPage]] = None

    @classmethod
    def from_row(cls, row, prefix: str = "") -> Pet:
        return cls(
            id=row[f"{prefix}id"],
            owner_id=row[f"{prefix}owner_id"],
            name=row[f"{prefix}name"],
            species=row[f"{prefix}species"],
            breed=row[f"{prefix}breed"],
            birth_date=from_db_time(row[f"{prefix}birth_date"]),
            passing_date=from_db_time(row[f"{prefix}passing_date"]),
            memorialized=bool(row[f"{prefix}memorialized"]),
            created_at=from_db_time(row[f"{prefix}created_at"]),
            updated_at=from_db_time(row[f"{prefix}updated_at"]),
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "species": self.species,
            "breed": self.breed,
            "birth_date": _iso(self.birth_date),
            "passing_date": _iso(self.passing_date),
            "memorialized": self.memorialized,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if self.memorial_pages is not None:
            data["memorial_pages"] = [page.to_dict() for page in self.memorial_pages]
        return data

    def to_public_dict(self) -> dict:
        """Pet fields safe to show on the public gallery (no owner id)."""
        return {
            "name": self.name,
            "species": self.species,
            "breed": self.breed,
            "birth_date": _iso(self.birth_date),
            "passing_date": _iso(self.passing_date),
        }


@dataclass
class Theme:
    """Visual theme applied to memorial pages."""
    id: str
    name: str
    description: Optional[str]
    primary_color: str
    secondary_color: str
    accent_color: str
    background_color: str
    heading_font: str
    body_font: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row, prefix: str = "") -> Theme:
        return cls(
            id=row[f"{prefix}id"],
            name=row[f"{prefix}name"],
            description=row[f"{prefix}description"],
            primary_color=row[f"{prefix}primary_color"],
            secondary_color=row[f"{prefix}secondary_color"],
            accent_color=row[f"{prefix}accent_color"],
            background_color=row[f"{prefix}background_color"],
            heading_font=row[f"{prefix}heading_font"],
            body_font=row[f"{prefix}body_font"],
            created_at=from_db_time(row[f"{prefix}created_at"]),
            updated_at=from_db_time(row[f"{prefix}updated_at"]),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "primary_color": self.primary_color,
            "secondary_color": self.secondary_color,
            "accent_color": self.accent_color,
            "background_color": self.background_color,
            "heading_font": self.heading_font,
            "body_font": self.body_font,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass
class MediaAsset:
    """
    An image or video shown on a memorial page.

    file_key points at the stored file; sort_order sets display order.
    """
    id: str
    memorial_id: str
    title: Optional[str]
    alt_text: Optional[str]
    caption: Optional[str]
    media_type: str
    file_key: str
    sort_order: int
    created_at: datetime

    @classmethod
    def from_row(cls, row) -> MediaAsset:
        return cls(
            id=row["id"],
            memorial_id=row["memorial_id"],
            title=row["title"],
            alt_text=row["alt_text"],
            caption=row["caption"],
            media_type=row["media_type"],
            file_key=row["file_key"],
            sort_order=row["sort_order"],
            created_at=from_db_time(row["created_at"]),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "memorial_id": self.memorial_id,
            "title": self.title,
            "alt_text": self.alt_text,
            "caption": self.caption,
            "media_type": self.media_type,
            "file_key": self.file_key,
            "sort_order": self.sort_order,
            "created_at": _iso(self.created_at),
        }


@dataclass
class MemorialPage:
    """
    A tribute page for one pet, draft or published.

    pet and theme are attached by list/detail lookups, media by detail
    lookups only.
    """
    id: str
    pet_id: str
    theme_id: Optional[str]
    title: str
    subtitle: Optional[str]
    slug: str
    summary: Optional[str]
    story: Optional[str]
    status: str
    published_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    pet: Optional[Pet] = field(default=None, repr=False)
    theme: Optional[Theme] = field(default=None, repr=False)
    media: Optional[list[MediaAsset]] = field(default=None, repr=False)

    @classmethod
    def from_row(cls, row, prefix: str = "") -> MemorialPage:
        return cls(
            id=row[f"{prefix}id"],
            pet_id=row[f"{prefix}pet_id"],
            theme_id=row[f"{prefix}theme_id"],
            title=row[f"{prefix}title"],
            subtitle=row[f"{prefix}subtitle"],
            slug=row[f"{prefix}slug"],
            summary=row[f"{prefix}summary"],
            story=row[f"{prefix}story"],
            status=row[f"{prefix}status"],
            published_at=from_db_time(row[f"{prefix}published_at"]),
            created_at=from_db_time(row[f"{prefix}created_at"]),
            updated_at=from_db_time(row[f"{prefix}updated_at"]),
        )

    @property
    def is_published(self) -> bool:
        return self.status == "published"

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "pet_id": self.pet_id,
            "theme_id": self.theme_id,
            "title": self.title,
            "subtitle": self.subtitle,
            "slug": self.slug,
            "summary": self.summary,
            "story": self.story,
            "status": self.status,
            "published_at": _iso(self.published_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if self.pet is not None:
            data["pet"] = self.pet.to_dict()
        if self.theme is not None or self.pet is not None:
            data["theme"] = self.theme.to_dict() if self.theme else None
        if self.media is not None:
            data["media"] = [asset.to_dict() for asset in self.media]
        return data

    def to_public_summary(self) -> dict:
        """Gallery card: enough to link to the page by slug."""
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "slug": self.slug,
            "summary": self.summary,
            "published_at": _iso(self.published_at),
            "pet": {"name": self.pet.name, "species": self.pet.species} if self.pet else None,
        }

    def to_public_dict(self) -> dict:
        data = self.to_public_summary()
        data["story"] = self.story
        data["pet"] = self.pet.to_public_dict() if self.pet else None
        data["theme"] = self.theme.to_dict() if self.theme else None
        data["media"] = [asset.to_dict() for asset in self.media or []]
        return data
