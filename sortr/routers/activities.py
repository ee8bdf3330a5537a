from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sortr.database import get_db
from sortr.models.activity import ActivityAction, EntityType
from sortr.schemas.activity import ActivityResponse, ActivityStats
from sortr.schemas.pagination import Page
from sortr.security import Identity, get_current_identity
import sortr.services.activity_service as svc

router = APIRouter(prefix="/api/activities", tags=["activities"])

# activity lists are capped lower than the other collections
ACTIVITY_MAX_LIMIT = 100


@router.get("", response_model=Page[ActivityResponse])
def list_activities(
    page: int = Query(1, ge=1),
    size: int = Query(ACTIVITY_MAX_LIMIT, ge=1, le=ACTIVITY_MAX_LIMIT),
    user_id: int | None = Query(None, alias="userId"),
    entity_type: EntityType | None = Query(None, alias="entityType"),
    entity_id: int | None = Query(None, alias="entityId"),
    action: ActivityAction | None = Query(None),
    date_from: date | None = Query(None, alias="dateFrom"),
    date_to: date | None = Query(None, alias="dateTo"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return svc.get_activities(
        db,
        identity,
        page=page,
        size=size,
        user_id=user_id,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("/recent", response_model=list[ActivityResponse], dependencies=[Depends(get_current_identity)])
def recent_activities(
    hours: int = Query(24, ge=1),
    limit: int = Query(50, ge=1, le=ACTIVITY_MAX_LIMIT),
    db: Session = Depends(get_db),
):
    return svc.get_recent(db, hours=hours, limit=limit)


@router.get("/stats", response_model=ActivityStats, dependencies=[Depends(get_current_identity)])
def activity_stats(db: Session = Depends(get_db)):
    return svc.get_stats(db)


@router.get("/entity/{entity_type}/{entity_id}", response_model=list[ActivityResponse], dependencies=[Depends(get_current_identity)])
def entity_activities(
    entity_type: EntityType,
    entity_id: int,
    limit: int = Query(50, ge=1, le=ACTIVITY_MAX_LIMIT),
    db: Session = Depends(get_db),
):
    return svc.get_entity_activities(db, entity_type, entity_id, limit=limit)
