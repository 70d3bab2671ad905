# content/schemas.py
"""
Input validation for the content services.

Update schemas distinguish "field omitted" from "field set to null" through
model_fields_set; only nullable columns accept an explicit null.
"""

from __future__ import annotations

from typing import ClassVar, Literal, Optional
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

HEX_COLOR_PATTERN = r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$"

MemorialStatus = Literal["draft", "published"]
MediaType = Literal["image", "video"]

# Relative storage key such as memorials/<id>/photo.jpg
FILE_KEY_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9._/-]*$"


class _InputModel(BaseModel):
    """Accepts both snake_case and camelCase keys (petId, passingDate, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _PartialUpdate(_InputModel):
    """Base for PATCH payloads."""

    NOT_NULLABLE: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_null_for_required_columns(self):
        for name in self.NOT_NULLABLE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Only the fields the caller actually sent."""
        return {name: getattr(self, name) for name in self.model_fields_set}


# =============================================================================
# Pets
# =============================================================================


class CreatePetInput(_InputModel):
    name: str = Field(min_length=2, max_length=120)
    species: str = Field(min_length=2, max_length=80)
    breed: Optional[str] = Field(default=None, max_length=120)
    birth_date: Optional[AwareDatetime] = None
    passing_date: Optional[AwareDatetime] = None
    memorialized: bool = False


class UpdatePetInput(_PartialUpdate):
    NOT_NULLABLE: ClassVar[tuple[str, ...]] = ("name", "species", "memorialized")

    name: Optional[str] = Field(default=None, min_length=2, max_length=120)
    species: Optional[str] = Field(default=None, min_length=2, max_length=80)
    breed: Optional[str] = Field(default=None, max_length=120)
    birth_date: Optional[AwareDatetime] = None
    passing_date: Optional[AwareDatetime] = None
    memorialized: Optional[bool] = None


# =============================================================================
# Themes
# =============================================================================


class CreateThemeInput(_InputModel):
    name: str = Field(min_length=3, max_length=120)
    description: Optional[str] = Field(default=None, max_length=255)
    primary_color: str = Field(pattern=HEX_COLOR_PATTERN)
    secondary_color: str = Field(pattern=HEX_COLOR_PATTERN)
    accent_color: str = Field(pattern=HEX_COLOR_PATTERN)
    background_color: str = Field(pattern=HEX_COLOR_PATTERN)
    heading_font: str = Field(min_length=2, max_length=80)
    body_font: str = Field(min_length=2, max_length=80)


# =============================================================================
# Memorial pages
# =============================================================================


class CreateMemorialInput(_InputModel):
    pet_id: UUID
    theme_id: Optional[UUID] = None
    title: str = Field(min_length=3, max_length=180)
    subtitle: Optional[str] = Field(default=None, max_length=255)
    summary: Optional[str] = None
    story: Optional[str] = None
    status: MemorialStatus = "draft"


class UpdateMemorialInput(_PartialUpdate):
    NOT_NULLABLE: ClassVar[tuple[str, ...]] = ("title", "status")

    theme_id: Optional[UUID] = None
    title: Optional[str] = Field(default=None, min_length=3, max_length=180)
    subtitle: Optional[str] = Field(default=None, max_length=255)
    summary: Optional[str] = None
    story: Optional[str] = None
    status: Optional[MemorialStatus] = None


class PublishMemorialInput(_InputModel):
    publish: bool
    scheduled_at: Optional[AwareDatetime] = None


# =============================================================================
# Media
# =============================================================================


class CreateMediaInput(_InputModel):
    title: Optional[str] = Field(default=None, max_length=180)
    alt_text: Optional[str] = Field(default=None, max_length=255)
    caption: Optional[str] = None
    media_type: MediaType = "image"
    file_key: str = Field(min_length=1, max_length=255, pattern=FILE_KEY_PATTERN)

    @field_validator("file_key")
    @classmethod
    def _no_parent_segments(cls, value: str) -> str:
        if ".." in value.split("/"):
            raise ValueError("file_key cannot contain '..' segments")
        return value


class MediaOrderItem(_InputModel):
    id: UUID
    sort_order: int


class ReorderMediaInput(_InputModel):
    items: list[MediaOrderItem]
