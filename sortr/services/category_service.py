from sqlalchemy.orm import Session
from sqlalchemy import select
from sortr.errors import Conflict, NotFound
from sortr.models.category import Category
from sortr.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse


def get_categories(db: Session) -> list[Category]:
    return db.scalars(select(Category).order_by(Category.name)).all()


def get_category(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if not category:
        raise NotFound(f"Category {category_id} not found")
    return category


def _check_name(db: Session, name: str, category_id: int | None = None) -> None:
    existing = db.scalar(select(Category).where(Category.name == name))
    if existing and existing.id != category_id:
        raise Conflict("Category already exists")


def create_category(db: Session, data: CategoryCreate) -> Category:
    _check_name(db, data.name)
    category = Category(name=data.name)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def update_category(db: Session, category_id: int, data: CategoryUpdate) -> Category:
    category = get_category(db, category_id)
    _check_name(db, data.name, category_id)
    category.name = data.name
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: int) -> CategoryResponse:
    # Items keep their free-text category
    category = get_category(db, category_id)
    snapshot = CategoryResponse.model_validate(category)
    db.delete(category)
    db.commit()
    return snapshot
