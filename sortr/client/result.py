"""Outcomes returned by every client operation. Nothing raises past a repository."""
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    message: str
    status: int | None = None


@dataclass(frozen=True)
class SessionExpired:
    message: str = "Your session has expired, please log in again"


Outcome = Union[Success[T], Failure, SessionExpired]
