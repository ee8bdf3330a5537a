from sortr.schemas.user import UserCreate, UserUpdate, UserResponse
from sortr.schemas.location import LocationCreate, LocationUpdate, LocationResponse, LocationNode
from sortr.schemas.box import BoxCreate, BoxUpdate, BoxResponse
from sortr.schemas.item import ItemCreate, ItemUpdate, ItemMoveRequest, ItemResponse
from sortr.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from sortr.schemas.activity import ActivityCreate, ActivityResponse
from sortr.schemas.share import ResourceRef, ShareCreate, ShareResponse
from sortr.schemas.pagination import Page

__all__ = [
    "UserCreate", "UserUpdate", "UserResponse",
    "LocationCreate", "LocationUpdate", "LocationResponse", "LocationNode",
    "BoxCreate", "BoxUpdate", "BoxResponse",
    "ItemCreate", "ItemUpdate", "ItemMoveRequest", "ItemResponse",
    "CategoryCreate", "CategoryUpdate", "CategoryResponse",
    "ActivityCreate", "ActivityResponse",
    "ResourceRef", "ShareCreate", "ShareResponse",
    "Page",
]
