from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sortr.database import get_db
from sortr.schemas.suggestion import (
    BoxSuggestions, CategorySuggestions, Duplicates, EmptyBoxes, NameSuggestions, SimilarItems,
)
from sortr.security import get_current_identity
import sortr.services.suggestion_service as svc

router = APIRouter(prefix="/api/suggestions", tags=["suggestions"], dependencies=[Depends(get_current_identity)])


@router.get("/category", response_model=CategorySuggestions)
def suggest_category(name: str = Query(""), db: Session = Depends(get_db)):
    return CategorySuggestions(suggestions=svc.suggest_category(db, name))


@router.get("/similar/{item_id}", response_model=SimilarItems)
def similar_items(item_id: int, db: Session = Depends(get_db)):
    return SimilarItems(similar=svc.similar_items(db, item_id))


@router.get("/duplicates", response_model=Duplicates)
def duplicates(
    name: str = Query(""),
    exclude_id: int | None = Query(None, alias="excludeId", ge=1),
    db: Session = Depends(get_db),
):
    return Duplicates(duplicates=svc.find_duplicates(db, name, exclude_id))


@router.get("/empty-boxes", response_model=EmptyBoxes)
def empty_boxes(location_id: int | None = Query(None, alias="locationId", ge=1), db: Session = Depends(get_db)):
    return EmptyBoxes(empty_boxes=svc.empty_boxes(db, location_id))


@router.get("/autocomplete", response_model=NameSuggestions)
def autocomplete(
    query: str = Query(""),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    return NameSuggestions(suggestions=svc.autocomplete(db, query, limit))


@router.get("/box-for-item", response_model=BoxSuggestions)
def box_for_item(
    category: str = Query(""),
    location_id: int | None = Query(None, alias="locationId", ge=1),
    db: Session = Depends(get_db),
):
    return BoxSuggestions(suggestions=svc.box_for_item(db, category, location_id))
