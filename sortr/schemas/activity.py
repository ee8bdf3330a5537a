from datetime import datetime
from typing import Any
from pydantic import Field
from sortr.models.activity import ActivityAction, EntityType
from sortr.schemas.base import CamelModel
from sortr.schemas.user import UserSummary


class ActivityCreate(CamelModel):
    """Fully formed activity record, as written by the logging helpers."""

    user_id: int | None = None
    action: ActivityAction
    entity_type: EntityType
    entity_id: int | None = None
    entity_name: str | None = None
    changes: dict[str, Any] | None = None
    request_meta: dict[str, Any] | None = None


class ActivityResponse(CamelModel):
    id: int
    user_id: int | None
    action: ActivityAction
    entity_type: EntityType
    entity_id: int | None
    entity_name: str | None
    changes: dict[str, Any] | None
    request_meta: dict[str, Any] | None = Field(default=None, serialization_alias="metadata")
    created_at: datetime
    user: UserSummary | None = None


class ActionCount(CamelModel):
    action: ActivityAction
    count: int


class EntityTypeCount(CamelModel):
    entity_type: EntityType
    count: int


class UserActivityCount(CamelModel):
    user_id: int
    username: str | None
    count: int


class ActivityStats(CamelModel):
    total: int
    by_action: list[ActionCount]
    by_entity_type: list[EntityTypeCount]
    top_users: list[UserActivityCount]
