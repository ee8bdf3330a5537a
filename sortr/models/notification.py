import enum
from datetime import datetime, timezone
from sqlalchemy import ForeignKey, String, Boolean, DateTime, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sortr.database import Base
from sortr.models.share import ResourceType


class NotificationType(str, enum.Enum):
    share = "share"
    comment = "comment"
    mention = "mention"
    expiration = "expiration"


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type: Mapped[NotificationType] = mapped_column(
        SAEnum(NotificationType, values_callable=lambda e: [x.value for x in e], native_enum=False),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(String(500), nullable=False)
    resource_type: Mapped[ResourceType | None] = mapped_column(
        SAEnum(ResourceType, values_callable=lambda e: [x.value for x in e], native_enum=False),
        nullable=True,
    )
    resource_id: Mapped[int | None] = mapped_column(nullable=True)
    # Only ever flips False -> True
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: Mapped["User"] = relationship(back_populates="notifications")
