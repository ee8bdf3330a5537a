from datetime import datetime
from typing import Annotated
from pydantic import Field, StringConstraints
from sortr.schemas.base import CamelModel
from sortr.schemas.user import UserSummary

Content = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2000)]


class CommentCreate(CamelModel):
    item_id: int = Field(..., ge=1)
    content: Content


class CommentUpdate(CamelModel):
    content: Content


class CommentResponse(CamelModel):
    id: int
    user_id: int
    item_id: int
    content: str
    created_at: datetime
    updated_at: datetime
    user: UserSummary | None = None
