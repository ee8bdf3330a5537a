import math
from typing import TypeVar, Generic
from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    pages: int
    size: int


def page_count(total: int, size: int) -> int:
    return math.ceil(total / size) if total else 1
