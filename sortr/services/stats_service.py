from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func, desc
from sortr.models.activity import Activity
from sortr.models.box import Box
from sortr.models.category import Category
from sortr.models.item import Item
from sortr.models.location import Location
from sortr.schemas.activity import ActivityResponse
from sortr.schemas.stats import (
    InventoryStats, Overview, CategoryCount, LocationCount, BoxCount, RecentItem,
)

TOP_N = 10


def _count(db: Session, query) -> int:
    return db.scalar(select(func.count()).select_from(query.subquery()))


def _item_location(item: Item) -> str:
    if item.box is not None and item.box.location is not None:
        return item.box.location.name
    if item.location is not None:
        return item.location.name
    return "-"


def get_inventory_stats(db: Session) -> InventoryStats:
    total_items = _count(db, select(Item.id))
    total_boxes = _count(db, select(Box.id))

    item_count = func.count(Item.id).label("item_count")
    box_rows = db.execute(
        select(Box.id, Box.name, Location.name, item_count)
        .join(Location, Location.id == Box.location_id, isouter=True)
        .join(Item, Item.box_id == Box.id, isouter=True)
        .group_by(Box.id, Box.name, Location.name)
        .order_by(desc(item_count), Box.name)
    ).all()
    empty_boxes = [BoxCount(id=i, name=n, location=loc or "-") for i, n, loc, c in box_rows if c == 0]
    top_boxes = [BoxCount(id=i, name=n, location=loc or "-", count=c) for i, n, loc, c in box_rows if c > 0][:TOP_N]

    by_category = db.execute(
        select(Item.category, func.count(Item.id).label("count"))
        .where(Item.category.is_not(None))
        .group_by(Item.category)
        .order_by(desc("count"))
        .limit(TOP_N)
    ).all()
    by_location = db.execute(
        select(Location.id, Location.name, item_count)
        .join(Item, Item.location_id == Location.id, isouter=True)
        .group_by(Location.id, Location.name)
        .order_by(desc(item_count), Location.name)
        .limit(TOP_N)
    ).all()

    recent_items = db.scalars(
        select(Item)
        .options(selectinload(Item.box).selectinload(Box.location), selectinload(Item.location))
        .order_by(desc(Item.created_at), desc(Item.id))
        .limit(TOP_N)
    ).all()
    recent_activity = db.scalars(
        select(Activity).options(selectinload(Activity.user)).order_by(desc(Activity.created_at), desc(Activity.id)).limit(TOP_N)
    ).all()

    overview = Overview(
        total_items=total_items,
        total_boxes=total_boxes,
        total_locations=_count(db, select(Location.id)),
        total_categories=_count(db, select(Category.id)),
        items_without_box=_count(db, select(Item.id).where(Item.box_id.is_(None))),
        items_without_location=_count(db, select(Item.id).where(Item.location_id.is_(None))),
        empty_boxes_count=len(empty_boxes),
        average_items_per_box=round(total_items / total_boxes, 2) if total_boxes else 0,
        box_utilization=round((total_boxes - len(empty_boxes)) / total_boxes * 100, 1) if total_boxes else 0,
    )
    return InventoryStats(
        overview=overview,
        items_by_category=[CategoryCount(category=c, count=n) for c, n in by_category],
        items_by_location=[LocationCount(id=i, name=n, count=c) for i, n, c in by_location],
        top_boxes=top_boxes,
        empty_boxes=empty_boxes,
        recent_items=[
            RecentItem(id=it.id, name=it.name, category=it.category, location=_item_location(it))
            for it in recent_items
        ],
        recent_activity=[ActivityResponse.model_validate(a) for a in recent_activity],
    )
