from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sortr.activity import ActivityObserver, log_activity
from sortr.config import DEFAULT_QUERY_LIMIT, MAX_QUERY_LIMIT
from sortr.database import get_db
from sortr.models.activity import ActivityAction, EntityType
from sortr.schemas.box import BoxCreate, BoxUpdate, BoxResponse
from sortr.schemas.pagination import Page
from sortr.security import get_current_identity
import sortr.services.box_service as svc

router = APIRouter(prefix="/api/boxes", tags=["boxes"], dependencies=[Depends(get_current_identity)])


@router.get("", response_model=Page[BoxResponse])
def list_boxes(
    page: int = Query(1, ge=1),
    size: int = Query(DEFAULT_QUERY_LIMIT, ge=1, le=MAX_QUERY_LIMIT),
    location_id: int | None = Query(None, alias="locationId", ge=1),
    db: Session = Depends(get_db),
):
    return svc.get_boxes(db, page=page, size=size, location_id=location_id)


@router.post("", response_model=BoxResponse, status_code=201)
def create_box(
    data: BoxCreate,
    db: Session = Depends(get_db),
    activity: ActivityObserver = Depends(log_activity(EntityType.box, ActivityAction.create)),
):
    box = svc.create_box(db, data)
    return activity.observe(BoxResponse.model_validate(box), body=data)


@router.get("/{box_id}", response_model=BoxResponse)
def get_box(box_id: int, db: Session = Depends(get_db)):
    return svc.get_box(db, box_id)


@router.put("/{box_id}", response_model=BoxResponse)
def update_box(
    box_id: int,
    data: BoxUpdate,
    db: Session = Depends(get_db),
    activity: ActivityObserver = Depends(log_activity(EntityType.box, ActivityAction.update)),
):
    box = svc.update_box(db, box_id, data)
    return activity.observe(BoxResponse.model_validate(box), body=data)


@router.delete("/{box_id}", response_model=BoxResponse)
def delete_box(
    box_id: int,
    db: Session = Depends(get_db),
    activity: ActivityObserver = Depends(log_activity(EntityType.box, ActivityAction.delete)),
):
    return activity.observe(svc.delete_box(db, box_id))
