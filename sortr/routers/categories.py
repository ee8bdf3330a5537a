from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sortr.database import get_db
from sortr.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from sortr.security import get_current_identity, require_admin
import sortr.services.category_service as svc

router = APIRouter(prefix="/api/categories", tags=["categories"], dependencies=[Depends(get_current_identity)])


@router.get("", response_model=list[CategoryResponse])
def list_categories(db: Session = Depends(get_db)):
    return svc.get_categories(db)


@router.post("", response_model=CategoryResponse, status_code=201, dependencies=[Depends(require_admin)])
def create_category(data: CategoryCreate, db: Session = Depends(get_db)):
    return svc.create_category(db, data)


@router.put("/{category_id}", response_model=CategoryResponse, dependencies=[Depends(require_admin)])
def update_category(category_id: int, data: CategoryUpdate, db: Session = Depends(get_db)):
    return svc.update_category(db, category_id, data)


@router.delete("/{category_id}", response_model=CategoryResponse, dependencies=[Depends(require_admin)])
def delete_category(category_id: int, db: Session = Depends(get_db)):
    return svc.delete_category(db, category_id)
