from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sortr.database import get_db
from sortr.models.share import ResourceType
from sortr.schemas.share import ResourceRef, ShareCreate, ShareResponse
from sortr.security import Identity, get_current_identity
import sortr.services.share_service as svc

router = APIRouter(prefix="/api/shares", tags=["shares"])


@router.get("", response_model=list[ShareResponse])
def my_shares(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return svc.get_my_shares(db, identity.id)


@router.post("", response_model=ShareResponse, status_code=201)
def create_share(
    data: ShareCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return svc.create_share(db, data, identity)


@router.delete("/{share_id}", response_model=ShareResponse)
def delete_share(share_id: int, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return svc.delete_share(db, share_id, identity)


@router.get("/resource/{resource_type}/{resource_id}", response_model=list[ShareResponse], dependencies=[Depends(get_current_identity)])
def resource_shares(resource_type: ResourceType, resource_id: int, db: Session = Depends(get_db)):
    return svc.get_resource_shares(db, ResourceRef(kind=resource_type, id=resource_id))
