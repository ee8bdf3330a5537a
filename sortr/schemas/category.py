from datetime import datetime
from typing import Annotated
from pydantic import StringConstraints
from sortr.schemas.base import CamelModel

CategoryName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class CategoryCreate(CamelModel):
    name: CategoryName


class CategoryUpdate(CamelModel):
    name: CategoryName


class CategoryResponse(CamelModel):
    id: int
    name: str
    created_at: datetime
