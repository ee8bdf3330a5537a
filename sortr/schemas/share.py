from datetime import datetime
from typing import Any
from pydantic import Field
from sortr.models.share import ResourceType, SharePermission
from sortr.schemas.base import CamelModel
from sortr.schemas.user import UserSummary


class ResourceRef(CamelModel):
    """Polymorphic reference to an item, box or location."""

    model_config = {"frozen": True}

    kind: ResourceType
    id: int

    def __str__(self) -> str:
        return f"{self.kind.value}/{self.id}"


class ShareCreate(CamelModel):
    user_id: int = Field(..., ge=1)
    resource_type: ResourceType
    resource_id: int = Field(..., ge=1)
    permission: SharePermission = SharePermission.view

    @property
    def resource(self) -> ResourceRef:
        return ResourceRef(kind=self.resource_type, id=self.resource_id)


class ShareResponse(CamelModel):
    id: int
    user_id: int
    shared_by_user_id: int
    resource_type: ResourceType
    resource_id: int
    permission: SharePermission
    created_at: datetime
    user: UserSummary | None = None
    shared_by: UserSummary | None = None
    resource: dict[str, Any] | None = None
