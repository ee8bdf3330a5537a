import enum
from datetime import datetime, timezone
from typing import Any
from sqlalchemy import ForeignKey, String, DateTime, JSON, Index, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sortr.database import Base


class ActivityAction(str, enum.Enum):
    create = "create"
    update = "update"
    delete = "delete"
    move = "move"
    upload_image = "upload_image"
    delete_image = "delete_image"


class EntityType(str, enum.Enum):
    item = "item"
    box = "box"
    location = "location"
    user = "user"


class Activity(Base):
    """Audit log row. Append-only, never updated or deleted by the application."""

    __tablename__ = "activities"
    __table_args__ = (
        Index("ix_activities_entity", "entity_type", "entity_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    # Null = system-generated
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    action: Mapped[ActivityAction] = mapped_column(
        SAEnum(ActivityAction, values_callable=lambda e: [x.value for x in e], native_enum=False),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[EntityType] = mapped_column(
        SAEnum(EntityType, values_callable=lambda e: [x.value for x in e], native_enum=False),
        nullable=False,
    )
    entity_id: Mapped[int | None] = mapped_column(nullable=True)
    entity_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    changes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    # "metadata" is reserved on declarative classes
    request_meta: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    user: Mapped["User | None"] = relationship(back_populates="activities")
