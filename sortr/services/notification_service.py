from sqlalchemy.orm import Session
from sqlalchemy import select, func, update, desc
from sortr.errors import Forbidden, NotFound
from sortr.models.notification import Notification
from sortr.schemas.notification import NotificationResponse

NOTIFICATION_LIMIT = 50


def get_notifications(db: Session, user_id: int, unread_only: bool = False) -> list[Notification]:
    query = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.is_read == False)  # noqa: E712
    return db.scalars(query.order_by(desc(Notification.created_at), desc(Notification.id)).limit(NOTIFICATION_LIMIT)).all()


def unread_count(db: Session, user_id: int) -> int:
    return db.scalar(
        select(func.count(Notification.id)).where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
    )


def _get_own(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = db.get(Notification, notification_id)
    if not notification:
        raise NotFound(f"Notification {notification_id} not found")
    if notification.user_id != user_id:
        raise Forbidden("Not authorized")
    return notification


def mark_read(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = _get_own(db, notification_id, user_id)
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: int) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        .values(is_read=True)
    )
    db.commit()
    return result.rowcount


def delete_notification(db: Session, notification_id: int, user_id: int) -> NotificationResponse:
    notification = _get_own(db, notification_id, user_id)
    snapshot = NotificationResponse.model_validate(notification)
    db.delete(notification)
    db.commit()
    return snapshot
