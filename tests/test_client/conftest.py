import json

import httpx
import pytest
from sortr.client.api import SortrApi
from sortr.client.events import SessionEvents
from sortr.client.token_store import TokenStore


class FakeServer:
    """Routes (method, path) to canned responses and records every request."""

    def __init__(self):
        self.routes: dict[tuple[str, str], dict | Exception] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, status: int = 200, body=None, exc: Exception | None = None, **kwargs):
        if exc is not None:
            self.routes[(method, path)] = exc
        elif "content" in kwargs:
            self.routes[(method, path)] = {"status_code": status, **kwargs}
        else:
            self.routes[(method, path)] = {"status_code": status, "json": body, **kwargs}

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        if isinstance(route, Exception):
            raise route
        # fresh response per call, httpx closes the stream it hands out
        return httpx.Response(**route)

    def body(self, request: httpx.Request):
        return json.loads(request.content)


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def store(tmp_path):
    return TokenStore(tmp_path / "credentials.json")


@pytest.fixture
def events():
    return SessionEvents()


@pytest.fixture
def api(server, store, events):
    client = SortrApi(store, events, base_url="https://sortr.test", transport=httpx.MockTransport(server))
    yield client
    client.close()
