from datetime import datetime
from pydantic import Field, field_validator
from sortr.schemas.base import CamelModel, Name, reject_null
from sortr.schemas.location import LocationSummary


class BoxSummary(CamelModel):
    id: int
    name: str
    location_id: int


class BoxCreate(CamelModel):
    name: Name
    location_id: int = Field(..., ge=1)


class BoxUpdate(CamelModel):
    name: Name | None = None
    location_id: int | None = Field(default=None, ge=1)

    @field_validator("name", "location_id")
    @classmethod
    def not_null(cls, value, info):
        return reject_null(value, info.field_name)


class BoxResponse(CamelModel):
    id: int
    name: str
    location_id: int
    location: LocationSummary | None = None
    created_at: datetime
    updated_at: datetime
