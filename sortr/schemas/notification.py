from datetime import datetime
from sortr.models.notification import NotificationType
from sortr.models.share import ResourceType
from sortr.schemas.base import CamelModel


class NotificationResponse(CamelModel):
    id: int
    user_id: int
    type: NotificationType
    message: str
    resource_type: ResourceType | None
    resource_id: int | None
    is_read: bool
    created_at: datetime


class UnreadCount(CamelModel):
    count: int
