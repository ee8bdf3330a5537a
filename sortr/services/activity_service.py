from datetime import date, datetime, time, timedelta, timezone
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func, desc
from sortr.errors import Forbidden
from sortr.models.activity import Activity, ActivityAction, EntityType
from sortr.models.user import User
from sortr.schemas.activity import ActivityStats, ActionCount, EntityTypeCount, UserActivityCount
from sortr.schemas.pagination import Page, page_count
from sortr.security import Identity


def get_activities(
    db: Session,
    identity: Identity,
    page: int = 1,
    size: int = 100,
    user_id: int | None = None,
    entity_type: EntityType | None = None,
    entity_id: int | None = None,
    action: ActivityAction | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> Page:
    """Newest first. Non-admins only ever see their own activity."""
    query = select(Activity).options(selectinload(Activity.user)).order_by(desc(Activity.created_at), desc(Activity.id))
    if user_id is not None:
        if not identity.is_admin and user_id != identity.id:
            raise Forbidden("Not authorized to view other users' activities")
        query = query.where(Activity.user_id == user_id)
    elif not identity.is_admin:
        query = query.where(Activity.user_id == identity.id)
    if entity_type is not None:
        query = query.where(Activity.entity_type == entity_type)
    if entity_id is not None:
        query = query.where(Activity.entity_id == entity_id)
    if action is not None:
        query = query.where(Activity.action == action)
    if date_from is not None:
        query = query.where(Activity.created_at >= datetime.combine(date_from, time.min, tzinfo=timezone.utc))
    if date_to is not None:
        # inclusive of the whole day
        end = datetime.combine(date_to, time.min, tzinfo=timezone.utc) + timedelta(days=1)
        query = query.where(Activity.created_at < end)
    total = db.scalar(select(func.count()).select_from(query.subquery()))
    activities = db.scalars(query.offset((page - 1) * size).limit(size)).all()
    return Page(items=activities, total=total, page=page, pages=page_count(total, size), size=size)


def get_recent(db: Session, hours: int = 24, limit: int = 50) -> list[Activity]:
    since = datetime.now(timezone.utc) - timedelta(hours=hours)
    return db.scalars(
        select(Activity)
        .options(selectinload(Activity.user))
        .where(Activity.created_at >= since)
        .order_by(desc(Activity.created_at), desc(Activity.id))
        .limit(limit)
    ).all()


def get_entity_activities(db: Session, entity_type: EntityType, entity_id: int, limit: int = 50) -> list[Activity]:
    return db.scalars(
        select(Activity)
        .options(selectinload(Activity.user))
        .where(Activity.entity_type == entity_type, Activity.entity_id == entity_id)
        .order_by(desc(Activity.created_at), desc(Activity.id))
        .limit(limit)
    ).all()


def get_stats(db: Session) -> ActivityStats:
    total = db.scalar(select(func.count(Activity.id)))
    by_action = db.execute(select(Activity.action, func.count(Activity.id)).group_by(Activity.action)).all()
    by_entity = db.execute(select(Activity.entity_type, func.count(Activity.id)).group_by(Activity.entity_type)).all()
    count = func.count(Activity.id).label("count")
    top_users = db.execute(
        select(Activity.user_id, User.username, count)
        .join(User, User.id == Activity.user_id, isouter=True)
        .where(Activity.user_id.is_not(None))
        .group_by(Activity.user_id, User.username)
        .order_by(desc(count))
        .limit(10)
    ).all()
    return ActivityStats(
        total=total,
        by_action=[ActionCount(action=a, count=c) for a, c in by_action],
        by_entity_type=[EntityTypeCount(entity_type=e, count=c) for e, c in by_entity],
        top_users=[UserActivityCount(user_id=u, username=name, count=c) for u, name, c in top_users],
    )
