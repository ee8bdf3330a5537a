from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sortr.database import get_db
from sortr.schemas.stats import InventoryStats
from sortr.security import get_current_identity
import sortr.services.stats_service as svc

router = APIRouter(prefix="/api/stats", tags=["stats"], dependencies=[Depends(get_current_identity)])


@router.get("", response_model=InventoryStats)
def inventory_stats(db: Session = Depends(get_db)):
    return svc.get_inventory_stats(db)
