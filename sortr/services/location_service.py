from sqlalchemy.orm import Session
from sqlalchemy import select, func, update
from sortr.errors import Conflict, NotFound, ValidationFailed
from sortr.models.location import Location
from sortr.models.box import Box
from sortr.models.item import Item
from sortr.schemas.location import LocationCreate, LocationUpdate, LocationResponse, LocationNode
from sortr.schemas.pagination import Page, page_count


def get_locations(db: Session, page: int = 1, size: int = 100) -> Page:
    query = select(Location).order_by(Location.name)
    total = db.scalar(select(func.count()).select_from(query.subquery()))
    locs = db.scalars(query.offset((page - 1) * size).limit(size)).all()
    return Page(items=locs, total=total, page=page, pages=page_count(total, size), size=size)


def get_location(db: Session, loc_id: int) -> Location:
    loc = db.get(Location, loc_id)
    if not loc:
        raise NotFound(f"Location {loc_id} not found")
    return loc


def _check_name(db: Session, name: str, loc_id: int | None = None) -> None:
    existing = db.scalar(select(Location).where(Location.name == name))
    if existing and existing.id != loc_id:
        raise Conflict("Location name already exists")


def _check_parent(db: Session, parent_id: int, loc_id: int | None = None) -> None:
    """Parent must exist and, for an existing location, must not be itself or a descendant."""
    parent = get_location(db, parent_id)
    if loc_id is None:
        return
    seen = set()
    node = parent
    while node is not None and node.id not in seen:
        if node.id == loc_id:
            raise ValidationFailed.for_field("parentId", "A location cannot be moved under itself or one of its descendants")
        seen.add(node.id)
        node = db.get(Location, node.parent_id) if node.parent_id else None


def create_location(db: Session, data: LocationCreate) -> Location:
    _check_name(db, data.name)
    if data.parent_id is not None:
        _check_parent(db, data.parent_id)
    loc = Location(**data.model_dump())
    db.add(loc)
    db.commit()
    db.refresh(loc)
    return loc


def update_location(db: Session, loc_id: int, data: LocationUpdate) -> Location:
    loc = get_location(db, loc_id)
    update_data = data.model_dump(exclude_unset=True)
    if "name" in update_data:
        _check_name(db, update_data["name"], loc_id)
    if update_data.get("parent_id") is not None:
        _check_parent(db, update_data["parent_id"], loc_id)
    for field, value in update_data.items():
        setattr(loc, field, value)
    db.commit()
    db.refresh(loc)
    return loc


def delete_location(db: Session, loc_id: int) -> LocationResponse:
    """Refuse while boxes remain; child locations and directly placed items are detached."""
    loc = get_location(db, loc_id)
    box_count = db.scalar(select(func.count(Box.id)).where(Box.location_id == loc_id))
    if box_count:
        raise Conflict(f"Cannot delete location with {box_count} box(es). Remove boxes first.")
    snapshot = LocationResponse.model_validate(loc)
    db.execute(update(Location).where(Location.parent_id == loc_id).values(parent_id=None))
    db.execute(update(Item).where(Item.location_id == loc_id).values(location_id=None))
    db.delete(loc)
    db.commit()
    return snapshot


def get_children(db: Session, loc_id: int) -> list[Location]:
    get_location(db, loc_id)
    return db.scalars(select(Location).where(Location.parent_id == loc_id).order_by(Location.name)).all()


def get_path(db: Session, loc_id: int) -> list[Location]:
    """Breadcrumb from the root down to ``loc_id``."""
    node = get_location(db, loc_id)
    path, seen = [], set()
    while node is not None and node.id not in seen:
        path.append(node)
        seen.add(node.id)
        node = db.get(Location, node.parent_id) if node.parent_id else None
    path.reverse()
    return path


def get_tree(db: Session) -> list[LocationNode]:
    box_counts = dict(db.execute(select(Box.location_id, func.count(Box.id)).group_by(Box.location_id)).all())
    nodes = {
        loc.id: LocationNode(id=loc.id, name=loc.name, parent_id=loc.parent_id, box_count=box_counts.get(loc.id, 0))
        for loc in db.scalars(select(Location).order_by(Location.name))
    }
    roots = []
    for node in nodes.values():
        parent = nodes.get(node.parent_id) if node.parent_id else None
        if parent is None:
            roots.append(node)
        else:
            parent.children.append(node)
    return roots
