from sortr.models.user import User
from sortr.models.location import Location
from sortr.models.box import Box
from sortr.models.item import Item
from sortr.models.category import Category
from sortr.models.activity import Activity, ActivityAction, EntityType
from sortr.models.share import Share, ResourceType, SharePermission
from sortr.models.notification import Notification, NotificationType
from sortr.models.comment import Comment

__all__ = [
    "User", "Location", "Box", "Item", "Category",
    "Activity", "ActivityAction", "EntityType",
    "Share", "ResourceType", "SharePermission",
    "Notification", "NotificationType",
    "Comment",
]
