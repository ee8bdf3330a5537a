"""Repositories: call the API, map DTOs to domain objects, keep list caches fresh."""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from sortr.client.api import SortrApi
from sortr.client.cache import TTLCache
from sortr.client.models import AuthResult, Box, Category, Item, Location, User
from sortr.client.result import Failure, Outcome, Success
from sortr.client.token_store import TokenStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# largest page the server hands out
LIST_PAGE_SIZE = 500


def map_outcome(outcome: Outcome[Any], mapper: Callable[[Any], T]) -> Outcome[T]:
    if not isinstance(outcome, Success):
        return outcome
    try:
        return Success(mapper(outcome.value))
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Unexpected response shape: %s", exc)
        return Failure("Unexpected response from server")


def _page_items(mapper: Callable[[dict], T]) -> Callable[[Any], list[T]]:
    def unwrap(body: Any) -> list[T]:
        rows = body["items"] if isinstance(body, dict) else body
        return [mapper(row) for row in rows]

    return unwrap


def _discard(_: Any) -> None:
    return None


class _Repository:
    def __init__(self, api: SortrApi, cache: TTLCache | None = None):
        self.api = api
        self.cache = cache or TTLCache()


class AuthRepository(_Repository):
    def __init__(self, api: SortrApi, store: TokenStore | None = None):
        super().__init__(api)
        self.store = store or api.store

    def _remember(self, outcome: Outcome[Any]) -> Outcome[AuthResult]:
        result = map_outcome(outcome, lambda body: AuthResult(token=body["token"], user=User.from_dto(body["user"])))
        if isinstance(result, Success) and isinstance(outcome, Success):
            self.store.save(result.value.token, outcome.value["user"])
        return result

    def login(self, username: str, password: str) -> Outcome[AuthResult]:
        return self._remember(self.api.post(
            "/api/login", json={"username": username, "password": password}, fallback="Login failed",
        ))

    def register(self, username: str, password: str, email: str | None = None, display_name: str | None = None) -> Outcome[AuthResult]:
        body = {"username": username, "password": password, "email": email, "displayName": display_name}
        return self._remember(self.api.post(
            "/api/register", json={k: v for k, v in body.items() if v is not None}, fallback="Registration failed",
        ))

    def google_sign_in(self, id_token: str) -> Outcome[AuthResult]:
        return self._remember(self.api.post(
            "/api/auth/google-mobile", json={"idToken": id_token}, fallback="Google sign-in failed",
        ))

    def github_sign_in(self, access_token: str) -> Outcome[AuthResult]:
        return self._remember(self.api.post(
            "/api/auth/github-mobile", json={"accessToken": access_token}, fallback="GitHub sign-in failed",
        ))

    def microsoft_sign_in(self, access_token: str) -> Outcome[AuthResult]:
        return self._remember(self.api.post(
            "/api/auth/microsoft-mobile", json={"accessToken": access_token}, fallback="Microsoft sign-in failed",
        ))

    def me(self) -> Outcome[User]:
        return map_outcome(self.api.get("/api/me", fallback="Failed to fetch profile"), User.from_dto)

    def logout(self) -> None:
        self.store.clear()
        self.cache.clear()

    def is_logged_in(self) -> bool:
        return self.store.token is not None


class LocationRepository(_Repository):
    PREFIX = "locations"

    def list(self) -> Outcome[list[Location]]:
        key = f"{self.PREFIX}:list"
        cached = self.cache.get(key)
        if cached is not None:
            return Success(cached)
        result = map_outcome(
            self.api.get("/api/locations", params={"size": LIST_PAGE_SIZE}, fallback="Failed to fetch locations"),
            _page_items(Location.from_dto),
        )
        if isinstance(result, Success):
            self.cache.set(key, result.value)
        return result

    def get(self, location_id: int) -> Outcome[Location]:
        return map_outcome(self.api.get(f"/api/locations/{location_id}", fallback="Failed to fetch location"), Location.from_dto)

    def children(self, location_id: int) -> Outcome[list[Location]]:
        return map_outcome(
            self.api.get(f"/api/locations/{location_id}/children", fallback="Failed to fetch locations"),
            _page_items(Location.from_dto),
        )

    def path(self, location_id: int) -> Outcome[list[Location]]:
        return map_outcome(
            self.api.get(f"/api/locations/{location_id}/path", fallback="Failed to fetch location path"),
            _page_items(Location.from_dto),
        )

    def _mutated(self, outcome: Outcome[T]) -> Outcome[T]:
        if isinstance(outcome, Success):
            self.cache.invalidate(self.PREFIX)
        return outcome

    def create(self, name: str, parent_id: int | None = None) -> Outcome[Location]:
        outcome = self.api.post("/api/locations", json={"name": name, "parentId": parent_id}, fallback="Failed to create location")
        return self._mutated(map_outcome(outcome, Location.from_dto))

    def update(self, location_id: int, **changes: Any) -> Outcome[Location]:
        body = {_camel(k): v for k, v in changes.items()}
        outcome = self.api.put(f"/api/locations/{location_id}", json=body, fallback="Failed to update location")
        return self._mutated(map_outcome(outcome, Location.from_dto))

    def delete(self, location_id: int) -> Outcome[None]:
        outcome = self.api.delete(f"/api/locations/{location_id}", fallback="Failed to delete location")
        return self._mutated(map_outcome(outcome, _discard))


class BoxRepository(_Repository):
    def list(self, location_id: int | None = None) -> Outcome[list[Box]]:
        params = {"size": LIST_PAGE_SIZE, "locationId": location_id}
        return map_outcome(self.api.get("/api/boxes", params=params, fallback="Failed to fetch boxes"), _page_items(Box.from_dto))

    def get(self, box_id: int) -> Outcome[Box]:
        return map_outcome(self.api.get(f"/api/boxes/{box_id}", fallback="Failed to fetch box"), Box.from_dto)

    def create(self, name: str, location_id: int) -> Outcome[Box]:
        outcome = self.api.post("/api/boxes", json={"name": name, "locationId": location_id}, fallback="Failed to create box")
        return map_outcome(outcome, Box.from_dto)

    def update(self, box_id: int, **changes: Any) -> Outcome[Box]:
        body = {_camel(k): v for k, v in changes.items()}
        return map_outcome(self.api.put(f"/api/boxes/{box_id}", json=body, fallback="Failed to update box"), Box.from_dto)

    def delete(self, box_id: int) -> Outcome[None]:
        return map_outcome(self.api.delete(f"/api/boxes/{box_id}", fallback="Failed to delete box"), _discard)


class ItemRepository(_Repository):
    def list(
        self,
        search: str | None = None,
        category: str | None = None,
        box_id: int | None = None,
        location_id: int | None = None,
        orphaned: bool | None = None,
        tag: str | None = None,
        favorite: bool | None = None,
    ) -> Outcome[list[Item]]:
        params = {
            "size": LIST_PAGE_SIZE,
            "search": search,
            "category": category,
            "boxId": box_id,
            "locationId": location_id,
            "orphaned": None if orphaned is None else str(orphaned).lower(),
            "tag": tag,
            "isFavorite": None if favorite is None else str(favorite).lower(),
        }
        return map_outcome(self.api.get("/api/items", params=params, fallback="Failed to fetch items"), _page_items(Item.from_dto))

    def get(self, item_id: int) -> Outcome[Item]:
        return map_outcome(self.api.get(f"/api/items/{item_id}", fallback="Failed to fetch item"), Item.from_dto)

    def create(self, item: Item) -> Outcome[Item]:
        return map_outcome(self.api.post("/api/items", json=item.to_request(), fallback="Failed to create item"), Item.from_dto)

    def update(self, item_id: int, **changes: Any) -> Outcome[Item]:
        body = {_camel(k): v for k, v in changes.items()}
        return map_outcome(self.api.put(f"/api/items/{item_id}", json=body, fallback="Failed to update item"), Item.from_dto)

    def move(self, item_id: int, box_id: int | None = None, location_id: int | None = None) -> Outcome[Item]:
        body = {k: v for k, v in (("boxId", box_id), ("locationId", location_id)) if v is not None}
        return map_outcome(self.api.post(f"/api/items/{item_id}/move", json=body, fallback="Failed to move item"), Item.from_dto)

    def delete(self, item_id: int) -> Outcome[None]:
        return map_outcome(self.api.delete(f"/api/items/{item_id}", fallback="Failed to delete item"), _discard)


class CategoryRepository(_Repository):
    PREFIX = "categories"

    def list(self) -> Outcome[list[Category]]:
        key = f"{self.PREFIX}:list"
        cached = self.cache.get(key)
        if cached is not None:
            return Success(cached)
        result = map_outcome(self.api.get("/api/categories", fallback="Failed to fetch categories"), _page_items(Category.from_dto))
        if isinstance(result, Success):
            self.cache.set(key, result.value)
        return result

    def _mutated(self, outcome: Outcome[T]) -> Outcome[T]:
        if isinstance(outcome, Success):
            self.cache.invalidate(self.PREFIX)
        return outcome

    def create(self, name: str) -> Outcome[Category]:
        outcome = self.api.post("/api/categories", json={"name": name}, fallback="Failed to create category")
        return self._mutated(map_outcome(outcome, Category.from_dto))

    def update(self, category_id: int, name: str) -> Outcome[Category]:
        outcome = self.api.put(f"/api/categories/{category_id}", json={"name": name}, fallback="Failed to update category")
        return self._mutated(map_outcome(outcome, Category.from_dto))

    def delete(self, category_id: int) -> Outcome[None]:
        outcome = self.api.delete(f"/api/categories/{category_id}", fallback="Failed to delete category")
        return self._mutated(map_outcome(outcome, _discard))


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)
