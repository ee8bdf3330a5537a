from sortr.client.api import SortrApi
from sortr.client.cache import TTLCache
from sortr.client.deeplink import parse_deep_link
from sortr.client.events import SessionEvents
from sortr.client.models import ResourceRef
from sortr.client.repositories import (
    AuthRepository, LocationRepository, BoxRepository, ItemRepository, CategoryRepository,
)
from sortr.client.result import Success, Failure, SessionExpired, Outcome
from sortr.client.token_store import TokenStore

__all__ = [
    "SortrApi", "TTLCache", "parse_deep_link", "SessionEvents", "ResourceRef",
    "AuthRepository", "LocationRepository", "BoxRepository", "ItemRepository", "CategoryRepository",
    "Success", "Failure", "SessionExpired", "Outcome",
    "TokenStore",
]
