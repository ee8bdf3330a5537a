"""Unit tests for the SQLAlchemy models."""
import pytest
from datetime import date, datetime
from sqlalchemy.exc import IntegrityError

from sortr.models.user import User
from sortr.models.location import Location
from sortr.models.box import Box
from sortr.models.item import Item
from sortr.models.activity import Activity, ActivityAction, EntityType
from sortr.models.share import Share, ResourceType, SharePermission
from sortr.models.notification import Notification, NotificationType
from sortr.models.comment import Comment


# --- User -------------------------------------------------------------------

def test_user_create(db):
    user = User(username="testuser", email="test@example.com", hashed_password="hashedpw")
    db.add(user)
    db.commit()
    db.refresh(user)

    assert user.id is not None
    assert user.is_admin is False
    assert user.can_log_in is True
    assert isinstance(user.created_at, datetime)


def test_oauth_only_user(db):
    user = User(username="octo", github_id="4242")
    db.add(user)
    db.commit()
    assert user.hashed_password is None
    assert user.can_log_in is True


def test_user_unique_username(db):
    db.add(User(username="dup", email="a@a.com", hashed_password="x"))
    db.commit()
    db.add(User(username="dup", email="b@b.com", hashed_password="x"))
    with pytest.raises(IntegrityError):
        db.commit()


# --- Location / Box / Item --------------------------------------------------

def test_location_unique_name(db):
    db.add(Location(name="Garage"))
    db.commit()
    db.add(Location(name="Garage"))
    with pytest.raises(IntegrityError):
        db.commit()


def test_location_parent_set_null_on_delete(db):
    parent = Location(name="House")
    db.add(parent)
    db.commit()
    child = Location(name="Room", parent_id=parent.id)
    db.add(child)
    db.commit()

    db.delete(parent)
    db.commit()
    db.refresh(child)
    assert child.parent_id is None


def test_box_requires_location(db):
    db.add(Box(name="Loose"))
    with pytest.raises(IntegrityError):
        db.commit()


def test_box_location_cannot_be_deleted_at_db_level(db):
    loc = Location(name="Garage")
    db.add(loc)
    db.commit()
    db.add(Box(name="Bin", location_id=loc.id))
    db.commit()

    db.delete(loc)
    with pytest.raises(IntegrityError):
        db.commit()


def test_item_relationships(db):
    loc = Location(name="Garage")
    db.add(loc)
    db.commit()
    box = Box(name="Bin", location_id=loc.id)
    db.add(box)
    db.commit()
    item = Item(name="Drill", box_id=box.id, images=["item-a.png"])
    db.add(item)
    db.commit()
    db.refresh(item)

    assert item.box.name == "Bin"
    assert item.box.location.name == "Garage"
    assert item.location is None
    assert item.images == ["item-a.png"]
    assert box.items == [item]


def test_item_tags_favorite_expiry_defaults(db):
    plain = Item(name="Kettle")
    dated = Item(name="Milk", tags=["dairy"], is_favorite=True, expiration_date=date(2030, 1, 31))
    db.add_all([plain, dated])
    db.commit()
    db.refresh(plain)
    db.refresh(dated)

    assert plain.tags is None
    assert plain.is_favorite is False
    assert plain.expiration_date is None
    assert dated.tags == ["dairy"]
    assert dated.expiration_date == date(2030, 1, 31)


def test_item_box_set_null_on_delete(db):
    loc = Location(name="Garage")
    db.add(loc)
    db.commit()
    box = Box(name="Bin", location_id=loc.id)
    db.add(box)
    db.commit()
    item = Item(name="Drill", box_id=box.id)
    db.add(item)
    db.commit()
    item_id = item.id

    db.delete(box)
    db.commit()
    db.expire_all()
    assert db.get(Item, item_id).box_id is None


# --- Activity / Share / Notification / Comment ------------------------------

def test_activity_user_set_null(db):
    user = User(username="bob", hashed_password="x")
    db.add(user)
    db.commit()
    db.add(Activity(
        user_id=user.id,
        action=ActivityAction.create,
        entity_type=EntityType.item,
        entity_id=1,
        entity_name="Drill",
        changes=None,
        request_meta={"ip": "127.0.0.1", "userAgent": "pytest"},
    ))
    db.commit()

    db.delete(user)
    db.commit()
    activity = db.query(Activity).one()
    assert activity.user_id is None
    assert activity.request_meta["userAgent"] == "pytest"
    assert activity.action == ActivityAction.create


def test_share_unique_per_user_and_resource(db):
    owner = User(username="owner", hashed_password="x")
    bob = User(username="bob", hashed_password="x")
    db.add_all([owner, bob])
    db.commit()
    for _ in range(2):
        db.add(Share(
            user_id=bob.id,
            shared_by_user_id=owner.id,
            resource_type=ResourceType.box,
            resource_id=3,
            permission=SharePermission.view,
        ))
    with pytest.raises(IntegrityError):
        db.commit()


def test_notification_defaults_unread(db):
    bob = User(username="bob", hashed_password="x")
    db.add(bob)
    db.commit()
    note = Notification(user_id=bob.id, type=NotificationType.share, message="hi")
    db.add(note)
    db.commit()
    db.refresh(note)
    assert note.is_read is False
    assert note.resource_type is None


def test_comments_deleted_with_item(db):
    bob = User(username="bob", hashed_password="x")
    item = Item(name="Tent")
    db.add_all([bob, item])
    db.commit()
    db.add(Comment(user_id=bob.id, item_id=item.id, content="pegs missing"))
    db.commit()

    db.delete(item)
    db.commit()
    assert db.query(Comment).count() == 0
