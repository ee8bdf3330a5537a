"""Thin ``httpx.Client`` wrapper that turns every response into an outcome."""
import logging
from collections.abc import Generator
from typing import Any

import httpx

from sortr.client.events import SessionEvents
from sortr.client.result import Failure, Outcome, SessionExpired, Success
from sortr.client.token_store import TokenStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 10.0

_PUBLIC_PATHS = ("/api/login", "/api/register")
_PUBLIC_PREFIX = "/api/auth/"


def is_public_path(path: str) -> bool:
    return path in _PUBLIC_PATHS or path.startswith(_PUBLIC_PREFIX)


class BearerAuth(httpx.Auth):
    """Attach the stored token to every request except the login endpoints."""

    def __init__(self, store: TokenStore):
        self._store = store

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        token = self._store.token
        if token and not is_public_path(request.url.path):
            request.headers["Authorization"] = f"Bearer {token}"
        yield request


def error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if not isinstance(body, dict):
        return fallback
    message = body.get("error") or body.get("detail")
    return message if isinstance(message, str) and message else fallback


class SortrApi:
    def __init__(
        self,
        store: TokenStore,
        events: SessionEvents | None = None,
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.store = store
        self.events = events or SessionEvents()
        self._client = httpx.Client(
            base_url=base_url or store.base_url or DEFAULT_BASE_URL,
            auth=BearerAuth(store),
            transport=transport,
            timeout=timeout,
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        files: Any = None,
        fallback: str = "Request failed",
    ) -> Outcome[Any]:
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = self._client.request(method, path, json=json, params=params, files=files)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            return Failure(f"Could not reach the server: {exc}")

        if response.status_code == 401 and not is_public_path(path):
            logger.info("Session expired on %s %s", method, path)
            self.store.clear()
            self.events.emit_expired()
            return SessionExpired()
        if response.is_error:
            return Failure(error_message(response, fallback), response.status_code)
        if response.status_code == 204 or not response.content:
            return Success(None)
        content_type = response.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            return Success(response.json())
        return Success(response.content)

    def get(self, path: str, **kwargs) -> Outcome[Any]:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> Outcome[Any]:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> Outcome[Any]:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs) -> Outcome[Any]:
        return self.request("DELETE", path, **kwargs)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "SortrApi":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
