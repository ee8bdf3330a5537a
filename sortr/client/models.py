"""Domain objects the client hands out, mapped from the camelCase DTOs."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

RESOURCE_KINDS = ("item", "box", "location")


def _dt(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class ResourceRef:
    kind: str
    id: int

    def __str__(self) -> str:
        return f"{self.kind}/{self.id}"


@dataclass
class User:
    id: int
    username: str
    display_name: str | None = None
    email: str | None = None
    is_admin: bool = False

    @classmethod
    def from_dto(cls, dto: dict[str, Any]) -> "User":
        return cls(
            id=dto["id"],
            username=dto["username"],
            display_name=dto.get("displayName"),
            email=dto.get("email"),
            is_admin=bool(dto.get("isAdmin")),
        )


@dataclass
class AuthResult:
    token: str
    user: User


@dataclass
class Location:
    id: int
    name: str
    parent_id: int | None = None
    created_at: datetime | None = None

    @classmethod
    def from_dto(cls, dto: dict[str, Any]) -> "Location":
        return cls(
            id=dto["id"],
            name=dto["name"],
            parent_id=dto.get("parentId"),
            created_at=_dt(dto.get("createdAt")),
        )


@dataclass
class Box:
    id: int
    name: str
    location_id: int | None = None
    location_name: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_dto(cls, dto: dict[str, Any]) -> "Box":
        location = dto.get("location") or {}
        return cls(
            id=dto["id"],
            name=dto["name"],
            location_id=dto.get("locationId"),
            location_name=location.get("name"),
            created_at=_dt(dto.get("createdAt")),
        )


@dataclass
class Item:
    id: int
    name: str
    category: str | None = None
    description: str | None = None
    box_id: int | None = None
    location_id: int | None = None
    images: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    is_favorite: bool = False
    expiration_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_dto(cls, dto: dict[str, Any]) -> "Item":
        return cls(
            id=dto["id"],
            name=dto["name"],
            category=dto.get("category"),
            description=dto.get("description"),
            box_id=dto.get("boxId"),
            location_id=dto.get("locationId"),
            images=list(dto.get("images") or []),
            tags=list(dto.get("tags") or []),
            is_favorite=bool(dto.get("isFavorite")),
            expiration_date=date.fromisoformat(dto["expirationDate"]) if dto.get("expirationDate") else None,
            created_at=_dt(dto.get("createdAt")),
            updated_at=_dt(dto.get("updatedAt")),
        )

    def to_request(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "boxId": self.box_id,
            "locationId": self.location_id,
            "tags": self.tags or None,
            "isFavorite": self.is_favorite,
            "expirationDate": self.expiration_date.isoformat() if self.expiration_date else None,
        }


@dataclass
class Category:
    id: int
    name: str

    @classmethod
    def from_dto(cls, dto: dict[str, Any]) -> "Category":
        return cls(id=dto["id"], name=dto["name"])
