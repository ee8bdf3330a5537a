from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sortr.database import get_db
from sortr.schemas.base import MessageResponse
from sortr.schemas.notification import NotificationResponse, UnreadCount
from sortr.security import Identity, get_current_identity
import sortr.services.notification_service as svc

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return svc.get_notifications(db, identity.id, unread_only=unread_only)


@router.get("/unread/count", response_model=UnreadCount)
def unread_count(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return UnreadCount(count=svc.unread_count(db, identity.id))


@router.put("/read-all", response_model=MessageResponse)
def mark_all_read(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    updated = svc.mark_all_read(db, identity.id)
    return MessageResponse(message=f"Marked {updated} notification(s) as read")


@router.put("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(notification_id: int, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return svc.mark_read(db, notification_id, identity.id)


@router.delete("/{notification_id}", response_model=NotificationResponse)
def delete_notification(notification_id: int, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return svc.delete_notification(db, notification_id, identity.id)
