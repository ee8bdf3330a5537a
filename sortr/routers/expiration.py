from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sortr.database import get_db
from sortr.schemas.expiration import ExpiryCheckResult
from sortr.schemas.item import ItemResponse
from sortr.security import Identity, get_current_identity, require_admin
import sortr.services.expiration_service as svc

router = APIRouter(prefix="/api/expiration", tags=["expiration"], dependencies=[Depends(get_current_identity)])


@router.get("/expired", response_model=list[ItemResponse])
def expired_items(db: Session = Depends(get_db)):
    return svc.get_expired(db)


@router.get("/expiring-soon", response_model=list[ItemResponse])
def expiring_soon(days: int = Query(svc.DEFAULT_SOON_DAYS, ge=1, le=365), db: Session = Depends(get_db)):
    return svc.get_expiring_soon(db, days)


@router.get("/all", response_model=list[ItemResponse])
def all_expiring(db: Session = Depends(get_db)):
    return svc.get_all_expiring(db)


@router.post("/check-and-notify", response_model=ExpiryCheckResult)
def check_and_notify(db: Session = Depends(get_db), identity: Identity = Depends(require_admin)):
    return svc.check_and_notify(db, identity.id)
