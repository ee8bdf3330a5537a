import enum
from datetime import datetime, timezone
from sqlalchemy import ForeignKey, DateTime, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sortr.database import Base


class ResourceType(str, enum.Enum):
    item = "item"
    location = "location"
    box = "box"


class SharePermission(str, enum.Enum):
    view = "view"
    edit = "edit"


class Share(Base):
    __tablename__ = "shares"
    __table_args__ = (
        UniqueConstraint("user_id", "resource_type", "resource_id", name="uq_share_user_resource"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    shared_by_user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    resource_type: Mapped[ResourceType] = mapped_column(
        SAEnum(ResourceType, values_callable=lambda e: [x.value for x in e], native_enum=False),
        nullable=False,
    )
    resource_id: Mapped[int] = mapped_column(nullable=False)
    permission: Mapped[SharePermission] = mapped_column(
        SAEnum(SharePermission, values_callable=lambda e: [x.value for x in e], native_enum=False),
        default=SharePermission.view,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: Mapped["User"] = relationship(foreign_keys=[user_id])
    shared_by: Mapped["User"] = relationship(foreign_keys=[shared_by_user_id])
