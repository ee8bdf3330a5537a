"""
Expiration tracking: items past or near their expiration date, and the
notifications raised for them.
"""
import logging
from datetime import date, datetime, timedelta, timezone
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select
from sortr.models.box import Box
from sortr.models.item import Item
from sortr.models.notification import Notification, NotificationType
from sortr.models.share import ResourceType
from sortr.schemas.expiration import ExpiryCheckResult, ExpiryNotice

logger = logging.getLogger(__name__)

DEFAULT_SOON_DAYS = 7
# check-and-notify looks at today and tomorrow
NOTIFY_WINDOW_DAYS = 1


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _query(*conditions):
    return (
        select(Item)
        .options(selectinload(Item.box).selectinload(Box.location), selectinload(Item.location))
        .where(Item.expiration_date.is_not(None), *conditions)
        .order_by(Item.expiration_date, Item.name)
    )


def get_expired(db: Session, today: date | None = None) -> list[Item]:
    today = today or utc_today()
    return db.scalars(_query(Item.expiration_date < today)).all()


def get_expiring_soon(db: Session, days: int = DEFAULT_SOON_DAYS, today: date | None = None) -> list[Item]:
    """Items expiring between today and ``days`` from now, both inclusive."""
    today = today or utc_today()
    return db.scalars(_query(Item.expiration_date.between(today, today + timedelta(days=days)))).all()


def get_all_expiring(db: Session) -> list[Item]:
    return db.scalars(_query()).all()


def expiry_message(item: Item, today: date) -> str:
    days = (item.expiration_date - today).days
    if days == 0:
        return f'"{item.name}" expires today!'
    return f'"{item.name}" expires in {days} day(s)'


def check_and_notify(db: Session, user_id: int, today: date | None = None) -> ExpiryCheckResult:
    """Notify ``user_id`` about items expiring today or tomorrow.

    An item that already has an unread expiration notification for this
    user is counted but not notified again.
    """
    today = today or utc_today()
    items = get_expiring_soon(db, NOTIFY_WINDOW_DAYS, today)
    already = set(db.scalars(
        select(Notification.resource_id).where(
            Notification.user_id == user_id,
            Notification.type == NotificationType.expiration,
            Notification.resource_type == ResourceType.item,
            Notification.is_read == False,  # noqa: E712
        )
    ).all())

    notices = []
    for item in items:
        if item.id in already:
            continue
        message = expiry_message(item, today)
        db.add(Notification(
            user_id=user_id,
            type=NotificationType.expiration,
            message=message,
            resource_type=ResourceType.item,
            resource_id=item.id,
        ))
        notices.append(ExpiryNotice(item_id=item.id, message=message))
    db.commit()
    logger.info("Expiration check: %d item(s) due, %d notification(s) created", len(items), len(notices))
    return ExpiryCheckResult(items_checked=len(items), notifications_created=len(notices), notifications=notices)
