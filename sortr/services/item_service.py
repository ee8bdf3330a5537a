import logging
import os
import uuid
from pathlib import Path
from fastapi import UploadFile
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import String, cast, select, func, or_
from sortr.errors import NotFound, ValidationFailed
from sortr.models.box import Box
from sortr.models.item import Item, MAX_IMAGES_PER_ITEM
from sortr.schemas.item import ItemCreate, ItemUpdate, ItemMoveRequest, ItemResponse
from sortr.schemas.pagination import Page, page_count
from sortr.services.box_service import get_box
from sortr.services.location_service import get_location

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"jpeg", "jpg", "png", "gif", "webp"}
MAX_IMAGE_BYTES = 5 * 1024 * 1024


def get_items(
    db: Session,
    page: int = 1,
    size: int = 100,
    search: str = "",
    category: str = "",
    box_id: int | None = None,
    location_id: int | None = None,
    orphaned: bool | None = None,
    tag: str = "",
    favorite: bool | None = None,
) -> Page:
    query = select(Item).options(selectinload(Item.box), selectinload(Item.location)).order_by(Item.name)
    if search:
        query = query.where(
            Item.name.ilike(f"%{search}%")
            | Item.description.ilike(f"%{search}%")
            | Item.category.ilike(f"%{search}%")
            | cast(Item.tags, String).ilike(f"%{search}%")
        )
    if category:
        query = query.where(Item.category == category)
    if box_id is not None:
        query = query.where(Item.box_id == box_id)
    if location_id is not None:
        # placed directly, or inside a box that sits there
        query = query.where(or_(Item.location_id == location_id, Item.box.has(Box.location_id == location_id)))
    if orphaned is True:
        query = query.where(Item.box_id.is_(None))
    elif orphaned is False:
        query = query.where(Item.box_id.is_not(None))
    if tag:
        # tags are stored as a JSON array of strings
        query = query.where(cast(Item.tags, String).ilike(f'%"{tag}"%'))
    if favorite is not None:
        query = query.where(Item.is_favorite == favorite)
    total = db.scalar(select(func.count()).select_from(query.subquery()))
    items = db.scalars(query.offset((page - 1) * size).limit(size)).all()
    return Page(items=items, total=total, page=page, pages=page_count(total, size), size=size)


def get_item(db: Session, item_id: int) -> Item:
    item = db.get(Item, item_id)
    if not item:
        raise NotFound(f"Item {item_id} not found")
    return item


def _check_refs(db: Session, values: dict) -> None:
    if values.get("box_id") is not None:
        get_box(db, values["box_id"])
    if values.get("location_id") is not None:
        get_location(db, values["location_id"])


def place_in_box(db: Session, values: dict, current_box_id: int | None = None) -> None:
    """An item in a box sits where the box sits.

    Fills ``location_id`` from the box; an explicit location elsewhere is rejected.
    """
    box_id = values["box_id"] if "box_id" in values else current_box_id
    if box_id is None:
        return
    box_location = get_box(db, box_id).location_id
    location_id = values.get("location_id")
    if location_id is not None and location_id != box_location:
        raise ValidationFailed.for_field(
            "locationId", f"Box {box_id} is in location {box_location}, not {location_id}"
        )
    values["location_id"] = box_location


def create_item(db: Session, data: ItemCreate) -> Item:
    values = data.model_dump()
    _check_refs(db, values)
    place_in_box(db, values)
    item = Item(**values)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def update_item(db: Session, item_id: int, data: ItemUpdate) -> Item:
    item = get_item(db, item_id)
    update_data = data.model_dump(exclude_unset=True)
    _check_refs(db, update_data)
    if "box_id" in update_data or "location_id" in update_data:
        place_in_box(db, update_data, item.box_id)
    for field, value in update_data.items():
        setattr(item, field, value)
    db.commit()
    db.refresh(item)
    return item


def delete_item(db: Session, item_id: int, upload_dir: str) -> ItemResponse:
    item = get_item(db, item_id)
    snapshot = ItemResponse.model_validate(item)
    images = list(item.images or [])
    db.delete(item)
    db.commit()
    for filename in images:
        _remove_file(upload_dir, filename)
    return snapshot


def move_item(db: Session, item_id: int, data: ItemMoveRequest) -> tuple[Item, dict]:
    """Place an item in a box and/or at a location.

    A box without an explicit location also moves the item to the box's location;
    a location outside the item's current box takes it out of that box.
    Returns the item and a ``{"from", "to"}`` placement diff.
    """
    item = get_item(db, item_id)
    values = data.model_dump(exclude_unset=True)
    if not values:
        raise ValidationFailed.for_field("boxId", "Provide boxId and/or locationId")
    _check_refs(db, values)
    before = {"boxId": item.box_id, "locationId": item.location_id}
    if "box_id" not in values and item.box is not None and values["location_id"] != item.box.location_id:
        values["box_id"] = None
    place_in_box(db, values, item.box_id)
    for field, value in values.items():
        setattr(item, field, value)
    db.commit()
    db.refresh(item)
    after = {"boxId": item.box_id, "locationId": item.location_id}
    return item, {"from": before, "to": after}


def _extension(filename: str | None) -> str:
    return Path(filename or "").suffix.lower().lstrip(".")


def _remove_file(upload_dir: str, filename: str) -> None:
    path = Path(upload_dir) / Path(filename).name
    try:
        path.unlink()
    except FileNotFoundError:
        logger.warning("Image %s already missing from %s", filename, upload_dir)


def add_images(db: Session, item_id: int, files: list[UploadFile], upload_dir: str) -> Item:
    """Validate every upload first, then store them all or none."""
    item = get_item(db, item_id)
    current = list(item.images or [])
    if not files:
        raise ValidationFailed.for_field("images", "No images uploaded")
    if len(current) + len(files) > MAX_IMAGES_PER_ITEM:
        raise ValidationFailed.for_field("images", f"Maximum {MAX_IMAGES_PER_ITEM} images allowed per item")

    payloads = []
    for upload in files:
        ext = _extension(upload.filename)
        subtype = (upload.content_type or "").split("/")[-1].lower()
        if ext not in ALLOWED_IMAGE_TYPES or subtype not in ALLOWED_IMAGE_TYPES:
            raise ValidationFailed.for_field("images", "Only image files are allowed (jpeg, jpg, png, gif, webp)")
        content = upload.file.read(MAX_IMAGE_BYTES + 1)
        if len(content) > MAX_IMAGE_BYTES:
            raise ValidationFailed.for_field("images", f"{upload.filename} is larger than 5 MB")
        payloads.append((ext, content))

    os.makedirs(upload_dir, exist_ok=True)
    stored = []
    for ext, content in payloads:
        filename = f"item-{uuid.uuid4().hex}.{ext}"
        (Path(upload_dir) / filename).write_bytes(content)
        stored.append(filename)

    item.images = current + stored
    db.commit()
    db.refresh(item)
    return item


def remove_image(db: Session, item_id: int, filename: str, upload_dir: str) -> Item:
    item = get_item(db, item_id)
    images = list(item.images or [])
    if filename not in images:
        raise NotFound("Image not found")
    images.remove(filename)
    item.images = images or None
    db.commit()
    db.refresh(item)
    _remove_file(upload_dir, filename)
    return item
