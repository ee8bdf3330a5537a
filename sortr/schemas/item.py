from datetime import date, datetime
from typing import Annotated
from pydantic import Field, StringConstraints, field_validator
from sortr.schemas.base import CamelModel, Name, reject_null
from sortr.schemas.box import BoxSummary
from sortr.schemas.location import LocationSummary

Category = Annotated[str, StringConstraints(strip_whitespace=True, max_length=128)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, max_length=2000)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]

MAX_TAGS_PER_ITEM = 20


def unique_tags(value):
    """Drop repeated tags (case-insensitive), keeping the first spelling."""
    if value is None:
        return None
    seen = set()
    tags = []
    for tag in value:
        if tag.lower() not in seen:
            seen.add(tag.lower())
            tags.append(tag)
    return tags


class ItemCreate(CamelModel):
    name: Name
    category: Category | None = None
    description: Description | None = None
    box_id: int | None = Field(default=None, ge=1)
    location_id: int | None = Field(default=None, ge=1)
    tags: list[Tag] | None = Field(default=None, max_length=MAX_TAGS_PER_ITEM)
    is_favorite: bool = False
    expiration_date: date | None = None

    @field_validator("tags")
    @classmethod
    def tags_unique(cls, value):
        return unique_tags(value)


class ItemUpdate(CamelModel):
    name: Name | None = None
    category: Category | None = None
    description: Description | None = None
    box_id: int | None = Field(default=None, ge=1)
    location_id: int | None = Field(default=None, ge=1)
    tags: list[Tag] | None = Field(default=None, max_length=MAX_TAGS_PER_ITEM)
    is_favorite: bool | None = None
    expiration_date: date | None = None

    @field_validator("tags")
    @classmethod
    def tags_unique(cls, value):
        return unique_tags(value)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value):
        return reject_null(value, "name")

    @field_validator("is_favorite")
    @classmethod
    def favorite_not_null(cls, value):
        return reject_null(value, "isFavorite")


class ItemMoveRequest(CamelModel):
    box_id: int | None = Field(default=None, ge=1)
    location_id: int | None = Field(default=None, ge=1)


class ItemResponse(CamelModel):
    id: int
    name: str
    category: str | None
    description: str | None
    box_id: int | None
    location_id: int | None
    images: list[str] = []
    tags: list[str] = []
    is_favorite: bool = False
    expiration_date: date | None = None
    box: BoxSummary | None = None
    location: LocationSummary | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("images", "tags", mode="before")
    @classmethod
    def list_default(cls, value):
        return value or []


class ImagesResponse(CamelModel):
    message: str
    images: list[str]
