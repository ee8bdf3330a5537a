import logging
import re
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from passlib.context import CryptContext
from sortr.errors import Conflict, NotFound, Unauthenticated, ValidationFailed
from sortr.models.user import User
from sortr.schemas.pagination import Page, page_count
from sortr.schemas.user import UserCreate, UserUpdate, UserResponse, RegisterRequest, ProfileUpdate

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

OAUTH_PROVIDERS = ("google", "github", "microsoft")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound(f"User {user_id} not found")
    return user


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username))


def get_users(db: Session, page: int = 1, size: int = 100) -> Page:
    total = db.scalar(select(func.count(User.id)))
    users = db.scalars(select(User).order_by(User.id).offset((page - 1) * size).limit(size)).all()
    return Page(items=users, total=total, page=page, pages=page_count(total, size), size=size)


def _admin_count(db: Session) -> int:
    return db.scalar(select(func.count(User.id)).where(User.is_admin == True))  # noqa: E712


def _check_unique(db: Session, user: User | None, username: str | None, email: str | None) -> None:
    if username and (user is None or username != user.username):
        if get_user_by_username(db, username):
            raise Conflict("Username already exists")
    if email and (user is None or email != user.email):
        if db.scalar(select(User).where(User.email == email)):
            raise Conflict("Email already exists")


def register(db: Session, data: RegisterRequest) -> User:
    """Create a password account. The very first account becomes admin."""
    _check_unique(db, None, data.username, data.email)
    is_first = db.scalar(select(func.count(User.id))) == 0
    user = User(
        username=data.username,
        email=data.email,
        display_name=data.display_name,
        hashed_password=hash_password(data.password),
        is_admin=is_first,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("AUDIT: registered user %s (admin=%s)", user.username, user.is_admin)
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    user = get_user_by_username(db, username)
    if not user or not user.hashed_password or not verify_password(password, user.hashed_password):
        logger.warning("AUDIT: failed login for %s", username)
        raise Unauthenticated("Invalid username or password")
    return user


def create_user(db: Session, data: UserCreate) -> User:
    _check_unique(db, None, data.username, data.email)
    user = User(
        username=data.username,
        email=data.email,
        display_name=data.display_name,
        hashed_password=hash_password(data.password),
        is_admin=data.is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("AUDIT: created user %s (admin=%s)", user.username, user.is_admin)
    return user


def update_user(db: Session, user_id: int, data: UserUpdate) -> User:
    user = get_user(db, user_id)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("is_admin") is False and user.is_admin and _admin_count(db) == 1:
        raise ValidationFailed.for_field("isAdmin", "Cannot remove admin privileges from the last admin user")
    _check_unique(db, user, update_data.get("username"), update_data.get("email"))

    password = update_data.pop("password", None)
    if password:
        update_data["hashed_password"] = hash_password(password)
    # username and is_admin cannot be cleared
    for field in ("username", "is_admin"):
        if field in update_data and update_data[field] is None:
            del update_data[field]
    for field, value in update_data.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("AUDIT: updated user %s fields=%s", user.username, sorted(update_data))
    return user


def delete_user(db: Session, user_id: int, acting_user_id: int) -> UserResponse:
    user = get_user(db, user_id)
    if user.id == acting_user_id:
        raise ValidationFailed.for_field("id", "Cannot delete your own account")
    if user.is_admin and _admin_count(db) == 1:
        raise ValidationFailed.for_field("id", "Cannot delete the last admin user")
    snapshot = UserResponse.model_validate(user)
    db.delete(user)
    db.commit()
    logger.info("AUDIT: deleted user %s", snapshot.username)
    return snapshot


def update_profile(db: Session, user_id: int, data: ProfileUpdate) -> User:
    user = get_user(db, user_id)
    update_data = data.model_dump(exclude_unset=True)
    _check_unique(db, user, update_data.get("username"), update_data.get("email"))

    new_password = update_data.pop("new_password", None)
    current_password = update_data.pop("current_password", None)
    if new_password:
        if not user.hashed_password:
            raise ValidationFailed.for_field("newPassword", "Cannot change password for OAuth accounts")
        if not current_password:
            raise ValidationFailed.for_field("currentPassword", "Current password is required to set a new password")
        if not verify_password(current_password, user.hashed_password):
            raise ValidationFailed.for_field("currentPassword", "Current password is incorrect")
        user.hashed_password = hash_password(new_password)
        logger.info("AUDIT: password changed for %s", user.username)

    if update_data.get("username") is None:
        update_data.pop("username", None)
    for field, value in update_data.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user


def _free_username(db: Session, wanted: str) -> str:
    base = re.sub(r"[^A-Za-z0-9_.-]", "", wanted)[:240] or "user"
    if len(base) < 3:
        base = f"{base}user"
    candidate, n = base, 1
    while get_user_by_username(db, candidate):
        n += 1
        candidate = f"{base}{n}"
    return candidate


def find_or_create_oauth_user(
    db: Session,
    provider: str,
    provider_id: str,
    email: str | None,
    display_name: str | None,
    username_hint: str | None,
) -> User:
    """Look up by provider id, then by email (linking the provider); else create."""
    if provider not in OAUTH_PROVIDERS:
        raise ValueError(f"Unknown OAuth provider: {provider}")
    column = getattr(User, f"{provider}_id")

    user = db.scalar(select(User).where(column == provider_id))
    if user:
        return user

    if email:
        user = db.scalar(select(User).where(User.email == email))
        if user:
            setattr(user, f"{provider}_id", provider_id)
            db.commit()
            db.refresh(user)
            logger.info("AUDIT: linked %s account to user %s", provider, user.username)
            return user

    is_first = db.scalar(select(func.count(User.id))) == 0
    user = User(
        username=_free_username(db, username_hint or (email.split("@")[0] if email else f"{provider}_{provider_id}")),
        email=email,
        display_name=display_name,
        is_admin=is_first,
    )
    setattr(user, f"{provider}_id", provider_id)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("AUDIT: created user %s via %s", user.username, provider)
    return user


def ensure_bootstrap_admin(db: Session, username: str, password: str) -> User | None:
    """Create the configured admin account when the users table is empty."""
    if db.scalar(select(User).limit(1)):
        return None
    admin = User(username=username, hashed_password=hash_password(password), is_admin=True)
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Created first admin user: %s", username)
    return admin
