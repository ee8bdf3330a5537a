from datetime import datetime
from pydantic import Field, field_validator
from sortr.schemas.base import CamelModel, Name, reject_null


class LocationSummary(CamelModel):
    id: int
    name: str


class LocationCreate(CamelModel):
    name: Name
    parent_id: int | None = Field(default=None, ge=1)


class LocationUpdate(CamelModel):
    name: Name | None = None
    parent_id: int | None = Field(default=None, ge=1)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value):
        return reject_null(value, "name")


class LocationResponse(CamelModel):
    id: int
    name: str
    parent_id: int | None
    created_at: datetime
    updated_at: datetime


class LocationNode(CamelModel):
    id: int
    name: str
    parent_id: int | None
    box_count: int = 0
    children: list["LocationNode"] = []
