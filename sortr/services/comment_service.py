from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select
from sortr.errors import Forbidden, NotFound
from sortr.models.comment import Comment
from sortr.models.notification import Notification, NotificationType
from sortr.models.share import Share, ResourceType
from sortr.schemas.comment import CommentCreate, CommentUpdate, CommentResponse
from sortr.security import Identity
from sortr.services.item_service import get_item


def get_item_comments(db: Session, item_id: int) -> list[Comment]:
    get_item(db, item_id)
    return db.scalars(
        select(Comment)
        .options(selectinload(Comment.user))
        .where(Comment.item_id == item_id)
        .order_by(Comment.created_at, Comment.id)
    ).all()


def get_comment(db: Session, comment_id: int) -> Comment:
    comment = db.get(Comment, comment_id)
    if not comment:
        raise NotFound(f"Comment {comment_id} not found")
    return comment


def create_comment(db: Session, data: CommentCreate, identity: Identity) -> Comment:
    """Add a comment and notify everyone the item is shared with, except the author."""
    item = get_item(db, data.item_id)
    comment = Comment(user_id=identity.id, item_id=item.id, content=data.content)
    db.add(comment)
    sharees = db.scalars(
        select(Share.user_id).where(Share.resource_type == ResourceType.item, Share.resource_id == item.id)
    ).all()
    for user_id in set(sharees) - {identity.id}:
        db.add(Notification(
            user_id=user_id,
            type=NotificationType.comment,
            message=f'{identity.username} commented on "{item.name}"',
            resource_type=ResourceType.item,
            resource_id=item.id,
        ))
    db.commit()
    db.refresh(comment)
    return comment


def update_comment(db: Session, comment_id: int, data: CommentUpdate, identity: Identity) -> Comment:
    comment = get_comment(db, comment_id)
    if comment.user_id != identity.id:
        raise Forbidden("Not authorized to update this comment")
    comment.content = data.content
    db.commit()
    db.refresh(comment)
    return comment


def delete_comment(db: Session, comment_id: int, identity: Identity) -> CommentResponse:
    comment = get_comment(db, comment_id)
    if comment.user_id != identity.id and not identity.is_admin:
        raise Forbidden("Not authorized to delete this comment")
    snapshot = CommentResponse.model_validate(comment)
    db.delete(comment)
    db.commit()
    return snapshot
