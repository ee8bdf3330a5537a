"""Seed script: fills the database with demo data."""
from datetime import date, timedelta

from sqlalchemy import select

from sortr.config import load_settings
from sortr.database import Base, make_engine, make_session_factory
from sortr.models import Box, Category, Item, Location, User
from sortr.services.user_service import hash_password


def seed():
    engine = make_engine(load_settings().DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    db = make_session_factory(engine)()

    if not db.scalar(select(User).where(User.username == "admin")):
        db.add(User(
            username="admin",
            email="admin@sortr.local",
            display_name="Administrator",
            hashed_password=hash_password("admin123"),
            is_admin=True,
        ))

    existing_categories = set(db.scalars(select(Category.name)).all())
    for name in ("Electronics", "Tools", "Kitchen", "Camping", "Documents"):
        if name not in existing_categories:
            db.add(Category(name=name))
    db.commit()

    # (name, parent name)
    locations_data = [
        ("Home", None),
        ("Garage", "Home"),
        ("Attic", "Home"),
        ("Basement", "Home"),
        ("Office", None),
    ]
    locations = {loc.name: loc for loc in db.scalars(select(Location)).all()}
    for name, parent in locations_data:
        if name not in locations:
            loc = Location(name=name, parent_id=locations[parent].id if parent else None)
            db.add(loc)
            db.flush()
            locations[name] = loc
    db.commit()

    boxes_data = [
        ("Power tools", "Garage"),
        ("Christmas decorations", "Attic"),
        ("Camping gear", "Basement"),
        ("Cables", "Office"),
    ]
    boxes = {box.name: box for box in db.scalars(select(Box)).all()}
    for name, location in boxes_data:
        if name not in boxes:
            box = Box(name=name, location_id=locations[location].id)
            db.add(box)
            db.flush()
            boxes[name] = box
    db.commit()

    # (name, category, description, box name, location name)
    items_data = [
        ("Cordless drill", "Tools", "18V with two batteries", "Power tools", None),
        ("Jigsaw", "Tools", None, "Power tools", None),
        ("String lights", None, "Warm white, 10 m", "Christmas decorations", None),
        ("Tent", "Camping", "Two-person dome tent", "Camping gear", None),
        ("Sleeping bag", "Camping", None, "Camping gear", None),
        ("HDMI cables", "Electronics", "Assorted lengths", "Cables", None),
        ("USB-C chargers", "Electronics", None, "Cables", None),
        ("Stand mixer", "Kitchen", None, None, "Basement"),
        ("Passports", "Documents", "Family passports", None, "Office"),
        ("Bicycle pump", None, None, None, None),
    ]
    # name -> (tags, favorite, expires in days)
    extras = {
        "Cordless drill": (["power", "cordless"], True, None),
        "Tent": (["camping", "summer"], False, None),
        "Passports": (["travel"], True, 900),
        "USB-C chargers": (["cables"], False, None),
    }
    existing_items = set(db.scalars(select(Item.name)).all())
    for name, category, description, box, location in items_data:
        if name in existing_items:
            continue
        box_obj = boxes.get(box) if box else None
        location_id = box_obj.location_id if box_obj else (locations[location].id if location else None)
        tags, favorite, expires_in = extras.get(name, (None, False, None))
        db.add(Item(
            name=name,
            category=category,
            description=description,
            box_id=box_obj.id if box_obj else None,
            location_id=location_id,
            tags=tags,
            is_favorite=favorite,
            expiration_date=date.today() + timedelta(days=expires_in) if expires_in else None,
        ))

    db.commit()
    db.close()
    engine.dispose()
    print("Seed complete.")


if __name__ == "__main__":
    seed()
