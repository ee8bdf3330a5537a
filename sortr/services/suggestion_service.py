"""
Suggestion helpers for item entry: category guesses, similar and duplicate
items, empty boxes, name autocomplete and where to put a new item.
"""
from difflib import SequenceMatcher
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func, desc
from sortr.models.box import Box
from sortr.models.item import Item
from sortr.models.location import Location
from sortr.schemas.suggestion import BoxSuggestion, CategorySuggestion, EmptyBox, ItemMatch, NameSuggestion
from sortr.services.item_service import get_item

CATEGORY_KEYWORDS = {
    "Electronics": ["phone", "laptop", "computer", "tablet", "charger", "cable", "headphone", "speaker", "monitor",
                    "keyboard", "mouse", "camera", "tv", "remote", "battery", "adapter", "usb", "hdmi"],
    "Kitchen": ["plate", "cup", "bowl", "knife", "fork", "spoon", "pan", "pot", "kettle", "blender", "toaster",
                "microwave", "oven", "refrigerator", "dish", "glass", "mug"],
    "Clothing": ["shirt", "pants", "dress", "shoe", "sock", "jacket", "coat", "sweater", "hat", "glove", "scarf",
                 "belt", "tie", "shorts", "skirt", "jeans"],
    "Books": ["book", "novel", "magazine", "journal", "textbook", "manual", "guide", "dictionary", "encyclopedia",
              "comic", "manga"],
    "Tools": ["hammer", "screwdriver", "wrench", "drill", "saw", "pliers", "tape", "nail", "screw", "bolt", "level",
              "ruler", "measure"],
    "Toys": ["toy", "game", "puzzle", "doll", "action figure", "lego", "board game", "card", "dice", "ball", "stuffed"],
    "Sports": ["ball", "bat", "racket", "club", "bike", "skate", "helmet", "glove", "shoe", "weight", "yoga",
               "fitness", "gym"],
    "Office": ["pen", "pencil", "paper", "notebook", "folder", "binder", "stapler", "clip", "tape", "marker",
               "highlighter", "envelope", "label"],
    "Cleaning": ["soap", "detergent", "cleaner", "sponge", "brush", "mop", "broom", "vacuum", "duster", "polish",
                 "wipe", "sanitizer"],
    "Garden": ["seed", "plant", "pot", "soil", "fertilizer", "hose", "sprinkler", "shovel", "rake", "glove", "shear",
               "trimmer"],
    "Bathroom": ["towel", "soap", "shampoo", "toothbrush", "toothpaste", "razor", "comb", "brush", "tissue",
                 "toilet paper"],
    "Furniture": ["chair", "table", "desk", "shelf", "cabinet", "drawer", "bed", "couch", "sofa", "lamp", "mirror"],
}

KEYWORD_CONFIDENCE = 0.8
HISTORY_CONFIDENCE = 0.6
MAX_SUGGESTIONS = 3
MAX_MATCHES = 5
SIMILAR_THRESHOLD = 0.3
DUPLICATE_THRESHOLD = 0.7
_SIMILAR_CANDIDATES = 50
_DUPLICATE_CANDIDATES = 20
_EMPTY_BOX_LIMIT = 10
_BOX_SUGGESTION_LIMIT = 5


def name_similarity(a: str, b: str) -> float:
    return SequenceMatcher(None, a.lower(), b.lower()).ratio()


def _where(item: Item) -> str:
    if item.box is not None and item.box.location is not None:
        return item.box.location.name
    if item.location is not None:
        return item.location.name
    return "-"


def _ranked_matches(name: str, candidates: list[Item], threshold: float) -> list[ItemMatch]:
    scored = [(name_similarity(name, c.name), c) for c in candidates]
    scored = sorted((s for s in scored if s[0] >= threshold), key=lambda s: (-s[0], s[1].name))
    return [
        ItemMatch(
            id=c.id,
            name=c.name,
            category=c.category,
            location=_where(c),
            box=c.box.name if c.box else "-",
            similarity=round(score * 100),
        )
        for score, c in scored[:MAX_MATCHES]
    ]


def _with_places():
    return select(Item).options(selectinload(Item.box).selectinload(Box.location), selectinload(Item.location))


def suggest_category(db: Session, name: str) -> list[CategorySuggestion]:
    """Keyword hits first, then categories already used by items with a similar name."""
    name = name.strip()
    if not name:
        return []
    lowered = name.lower()
    suggestions = []
    for category, keywords in CATEGORY_KEYWORDS.items():
        hit = next((k for k in keywords if k in lowered), None)
        if hit:
            suggestions.append(CategorySuggestion(
                category=category, confidence=KEYWORD_CONFIDENCE, reason=f"Contains keyword: {hit}",
            ))

    used = db.scalars(
        select(Item.category)
        .where(Item.name.ilike(f"%{name}%"), Item.category.is_not(None))
        .group_by(Item.category)
        .order_by(desc(func.count(Item.id)), Item.category)
        .limit(MAX_SUGGESTIONS)
    ).all()
    known = {s.category for s in suggestions}
    for category in used:
        if category not in known:
            suggestions.append(CategorySuggestion(
                category=category, confidence=HISTORY_CONFIDENCE, reason="Based on similar items",
            ))
    # stable: keyword hits keep their table order
    suggestions.sort(key=lambda s: -s.confidence)
    return suggestions[:MAX_SUGGESTIONS]


def similar_items(db: Session, item_id: int) -> list[ItemMatch]:
    item = get_item(db, item_id)
    query = _with_places().where(Item.id != item.id)
    if item.category:
        query = query.where(Item.category == item.category)
    candidates = db.scalars(query.order_by(Item.id).limit(_SIMILAR_CANDIDATES)).all()
    return _ranked_matches(item.name, candidates, SIMILAR_THRESHOLD)


def find_duplicates(db: Session, name: str, exclude_id: int | None = None) -> list[ItemMatch]:
    name = name.strip()
    if len(name) < 3:
        return []
    query = _with_places().where(Item.name.ilike(f"%{name}%"))
    if exclude_id is not None:
        query = query.where(Item.id != exclude_id)
    candidates = db.scalars(query.order_by(Item.id).limit(_DUPLICATE_CANDIDATES)).all()
    return _ranked_matches(name, candidates, DUPLICATE_THRESHOLD)


def empty_boxes(db: Session, location_id: int | None = None) -> list[EmptyBox]:
    query = (
        select(Box.id, Box.name, Box.location_id, Location.name)
        .join(Location, Location.id == Box.location_id, isouter=True)
        .where(~Box.items.any())
        .order_by(Box.name)
        .limit(_EMPTY_BOX_LIMIT)
    )
    if location_id is not None:
        query = query.where(Box.location_id == location_id)
    return [
        EmptyBox(id=box_id, name=name, location=loc or "-", location_id=loc_id)
        for box_id, name, loc_id, loc in db.execute(query).all()
    ]


def autocomplete(db: Session, prefix: str, limit: int = 10) -> list[NameSuggestion]:
    prefix = prefix.strip()
    if len(prefix) < 2:
        return []
    rows = db.execute(
        select(Item.name, Item.category)
        .where(Item.name.ilike(f"{prefix}%"))
        .group_by(Item.name, Item.category)
        .order_by(Item.name)
        .limit(limit)
    ).all()
    return [NameSuggestion(name=name, category=category) for name, category in rows]


def box_for_item(db: Session, category: str, location_id: int | None = None) -> list[BoxSuggestion]:
    """Boxes already holding the most items of ``category``."""
    category = category.strip()
    if not category:
        return []
    item_count = func.count(Item.id).label("item_count")
    query = (
        select(Box.id, Box.name, Location.name, item_count)
        .join(Item, Item.box_id == Box.id)
        .join(Location, Location.id == Box.location_id, isouter=True)
        .where(Item.category == category)
        .group_by(Box.id, Box.name, Location.name)
        .order_by(desc(item_count), Box.name)
        .limit(_BOX_SUGGESTION_LIMIT)
    )
    if location_id is not None:
        query = query.where(Box.location_id == location_id)
    return [
        BoxSuggestion(
            box_id=box_id,
            box_name=name,
            location=loc or "-",
            item_count=count,
            reason=f"Already has {count} {category} items",
        )
        for box_id, name, loc, count in db.execute(query).all()
    ]
