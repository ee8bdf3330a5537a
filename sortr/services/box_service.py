from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func, update
from sortr.errors import NotFound
from sortr.models.box import Box
from sortr.models.item import Item
from sortr.schemas.box import BoxCreate, BoxUpdate, BoxResponse
from sortr.schemas.pagination import Page, page_count
from sortr.services.location_service import get_location


def get_boxes(db: Session, page: int = 1, size: int = 100, location_id: int | None = None) -> Page:
    query = select(Box).options(selectinload(Box.location)).order_by(Box.name)
    if location_id is not None:
        query = query.where(Box.location_id == location_id)
    total = db.scalar(select(func.count()).select_from(query.subquery()))
    boxes = db.scalars(query.offset((page - 1) * size).limit(size)).all()
    return Page(items=boxes, total=total, page=page, pages=page_count(total, size), size=size)


def get_box(db: Session, box_id: int) -> Box:
    box = db.get(Box, box_id)
    if not box:
        raise NotFound(f"Box {box_id} not found")
    return box


def create_box(db: Session, data: BoxCreate) -> Box:
    get_location(db, data.location_id)
    box = Box(**data.model_dump())
    db.add(box)
    db.commit()
    db.refresh(box)
    return box


def update_box(db: Session, box_id: int, data: BoxUpdate) -> Box:
    box = get_box(db, box_id)
    update_data = data.model_dump(exclude_unset=True)
    if "location_id" in update_data:
        get_location(db, update_data["location_id"])
    for field, value in update_data.items():
        setattr(box, field, value)
    if "location_id" in update_data:
        # contents travel with the box
        db.execute(update(Item).where(Item.box_id == box_id).values(location_id=box.location_id))
    db.commit()
    db.refresh(box)
    return box


def delete_box(db: Session, box_id: int) -> BoxResponse:
    """Items inside are kept, with box_id cleared."""
    box = get_box(db, box_id)
    snapshot = BoxResponse.model_validate(box)
    db.execute(update(Item).where(Item.box_id == box_id).values(box_id=None))
    db.delete(box)
    db.commit()
    return snapshot
