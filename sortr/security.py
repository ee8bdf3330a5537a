"""Bearer-token authentication.

Tokens are HS256 JWTs carrying the identity claims, so protected routes never
hit the database to find out who is calling.
"""
from datetime import datetime, timedelta, timezone

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel

from sortr.config import Settings, get_settings
from sortr.errors import Forbidden, InvalidToken, Unauthenticated
from sortr.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


class Identity(BaseModel):
    id: int
    username: str
    display_name: str | None = None
    is_admin: bool = False


def create_access_token(settings: Settings, user: User, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    claims = {
        "sub": str(user.id),
        "id": user.id,
        "username": user.username,
        "displayName": user.display_name,
        "isAdmin": user.is_admin,
        "exp": expire,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(settings: Settings, token: str) -> Identity:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise InvalidToken("Token has expired")
    except JWTError:
        raise InvalidToken()

    user_id = payload.get("id")
    username = payload.get("username")
    if user_id is None or username is None:
        raise InvalidToken()
    return Identity(
        id=user_id,
        username=username,
        display_name=payload.get("displayName"),
        is_admin=bool(payload.get("isAdmin", False)),
    )


def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Identity | None:
    """Dependency: the caller's identity, or None when no token was sent.

    A token that is present but bad still fails.
    """
    if credentials is None:
        return None
    return decode_access_token(settings, credentials.credentials)


def get_current_identity(identity: Identity | None = Depends(get_optional_identity)) -> Identity:
    if identity is None:
        raise Unauthenticated()
    return identity


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise Forbidden("Admin access required")
    return identity
