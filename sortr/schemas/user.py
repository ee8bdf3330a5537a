from datetime import datetime
from typing import Annotated
from pydantic import EmailStr, Field, StringConstraints, field_validator
from sortr.schemas.base import CamelModel

Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=255)]
Password = Annotated[str, Field(min_length=6, max_length=128)]


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class UserSummary(CamelModel):
    id: int
    username: str
    display_name: str | None = None


class UserResponse(UserSummary):
    email: str | None = None
    is_admin: bool
    created_at: datetime
    updated_at: datetime


class UserCreate(CamelModel):
    username: Username
    password: Password
    email: EmailStr | None = None
    display_name: str | None = Field(default=None, max_length=255)
    is_admin: bool = False

    @field_validator("email", "display_name", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class UserUpdate(CamelModel):
    username: Username | None = None
    password: Password | None = None
    email: EmailStr | None = None
    display_name: str | None = Field(default=None, max_length=255)
    is_admin: bool | None = None

    @field_validator("email", "display_name", "password", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class RegisterRequest(CamelModel):
    username: Username
    password: Password
    email: EmailStr | None = None
    display_name: str | None = Field(default=None, max_length=255)

    @field_validator("email", "display_name", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class LoginRequest(CamelModel):
    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    password: Annotated[str, Field(min_length=1)]


class ProfileUpdate(CamelModel):
    username: Username | None = None
    display_name: str | None = Field(default=None, max_length=255)
    email: EmailStr | None = None
    current_password: str | None = None
    new_password: Password | None = None

    @field_validator("email", "display_name", "current_password", "new_password", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class OAuthMobileRequest(CamelModel):
    """Google sends an ID token; GitHub and Microsoft send an access token."""

    id_token: str | None = None
    access_token: str | None = None


class TokenResponse(CamelModel):
    token: str
    user: UserResponse
