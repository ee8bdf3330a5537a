from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sortr.activity import ActivityObserver, log_activity
from sortr.config import DEFAULT_QUERY_LIMIT, MAX_QUERY_LIMIT
from sortr.database import get_db
from sortr.models.activity import ActivityAction, EntityType
from sortr.schemas.pagination import Page
from sortr.schemas.user import UserCreate, UserUpdate, UserResponse
from sortr.security import Identity, require_admin
import sortr.services.user_service as svc

router = APIRouter(prefix="/api/users", tags=["users"], dependencies=[Depends(require_admin)])


def user_id_of(request, payload, body):
    return payload["id"] if payload else None


def username_of(request, payload, body):
    return payload["username"] if payload else None


@router.get("", response_model=Page[UserResponse])
def list_users(
    page: int = Query(1, ge=1),
    size: int = Query(DEFAULT_QUERY_LIMIT, ge=1, le=MAX_QUERY_LIMIT),
    db: Session = Depends(get_db),
):
    return svc.get_users(db, page=page, size=size)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    activity: ActivityObserver = Depends(log_activity(EntityType.user, ActivityAction.create, entity_name=username_of)),
):
    user = svc.create_user(db, data)
    return activity.observe(UserResponse.model_validate(user), body=data)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return svc.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    activity: ActivityObserver = Depends(log_activity(EntityType.user, ActivityAction.update, entity_name=username_of)),
):
    user = svc.update_user(db, user_id, data)
    return activity.observe(UserResponse.model_validate(user), body=data)


@router.delete("/{user_id}", response_model=UserResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
    activity: ActivityObserver = Depends(log_activity(EntityType.user, ActivityAction.delete, entity_name=username_of)),
):
    return activity.observe(svc.delete_user(db, user_id, identity.id))
