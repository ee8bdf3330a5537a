from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sortr.activity import ActivityObserver, log_activity
from sortr.config import DEFAULT_QUERY_LIMIT, MAX_QUERY_LIMIT
from sortr.database import get_db
from sortr.models.activity import ActivityAction, EntityType
from sortr.schemas.location import LocationCreate, LocationUpdate, LocationResponse, LocationSummary, LocationNode
from sortr.schemas.pagination import Page
from sortr.security import get_current_identity
import sortr.services.location_service as svc

router = APIRouter(prefix="/api/locations", tags=["locations"], dependencies=[Depends(get_current_identity)])


@router.get("", response_model=Page[LocationResponse])
def list_locations(
    page: int = Query(1, ge=1),
    size: int = Query(DEFAULT_QUERY_LIMIT, ge=1, le=MAX_QUERY_LIMIT),
    db: Session = Depends(get_db),
):
    return svc.get_locations(db, page=page, size=size)


@router.get("/tree", response_model=list[LocationNode])
def location_tree(db: Session = Depends(get_db)):
    return svc.get_tree(db)


@router.post("", response_model=LocationResponse, status_code=201)
def create_location(
    data: LocationCreate,
    db: Session = Depends(get_db),
    activity: ActivityObserver = Depends(log_activity(EntityType.location, ActivityAction.create)),
):
    loc = svc.create_location(db, data)
    return activity.observe(LocationResponse.model_validate(loc), body=data)


@router.get("/{loc_id}", response_model=LocationResponse)
def get_location(loc_id: int, db: Session = Depends(get_db)):
    return svc.get_location(db, loc_id)


@router.put("/{loc_id}", response_model=LocationResponse)
def update_location(
    loc_id: int,
    data: LocationUpdate,
    db: Session = Depends(get_db),
    activity: ActivityObserver = Depends(log_activity(EntityType.location, ActivityAction.update)),
):
    loc = svc.update_location(db, loc_id, data)
    return activity.observe(LocationResponse.model_validate(loc), body=data)


@router.delete("/{loc_id}", response_model=LocationResponse)
def delete_location(
    loc_id: int,
    db: Session = Depends(get_db),
    activity: ActivityObserver = Depends(log_activity(EntityType.location, ActivityAction.delete)),
):
    return activity.observe(svc.delete_location(db, loc_id))


@router.get("/{loc_id}/children", response_model=list[LocationResponse])
def location_children(loc_id: int, db: Session = Depends(get_db)):
    return svc.get_children(db, loc_id)


@router.get("/{loc_id}/path", response_model=list[LocationSummary])
def location_path(loc_id: int, db: Session = Depends(get_db)):
    return svc.get_path(db, loc_id)
