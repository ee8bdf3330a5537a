"""Token store, TTL cache, session events and deep links."""
import os
import stat

import pytest

from sortr.client.cache import TTLCache
from sortr.client.deeplink import parse_deep_link
from sortr.client.events import SessionEvents
from sortr.client.models import ResourceRef
from sortr.client.token_store import TokenStore


def test_token_store_persists_with_owner_only_permissions(tmp_path):
    path = tmp_path / "nested" / "credentials.json"
    store = TokenStore(path)
    store.save("tok", {"id": 1, "username": "alice", "hashedPassword": "never"})
    store.set_base_url("https://home.example.com/")

    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600
    again = TokenStore(path)
    assert again.token == "tok"
    assert again.user == {"id": 1, "username": "alice"}
    assert again.base_url == "https://home.example.com"


def test_token_store_clear_keeps_base_url(tmp_path):
    store = TokenStore(tmp_path / "credentials.json")
    store.set_base_url("https://home.example.com")
    store.save("tok")
    store.clear()

    again = TokenStore(tmp_path / "credentials.json")
    assert again.token is None
    assert again.base_url == "https://home.example.com"


def test_token_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text("{not json")
    assert TokenStore(path).token is None


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_cache_expires():
    clock = Clock()
    cache = TTLCache(ttl=60, clock=clock)
    cache.set("locations:list", [1])
    clock.now = 59
    assert cache.get("locations:list") == [1]
    clock.now = 60
    assert cache.get("locations:list") is None


def test_cache_prefix_invalidation():
    cache = TTLCache()
    cache.set("locations:list", [1])
    cache.set("locations:tree", [2])
    cache.set("categories:list", [3])
    cache.invalidate("locations")
    assert cache.get("locations:list") is None
    assert cache.get("locations:tree") is None
    assert cache.get("categories:list") == [3]


def test_session_events_unsubscribe_and_isolation():
    events = SessionEvents()
    calls = []

    def broken():
        raise RuntimeError("listener bug")

    events.subscribe(broken)
    unsubscribe = events.subscribe(lambda: calls.append("a"))
    events.emit_expired()
    unsubscribe()
    events.emit_expired()
    assert calls == ["a"]


@pytest.mark.parametrize("uri, expected", [
    ("sortr://item/5", ResourceRef("item", 5)),
    ("sortr://box/12/", ResourceRef("box", 12)),
    ("sortr://LOCATION/3", ResourceRef("location", 3)),
    ("https://sortr.app/box/7", ResourceRef("box", 7)),
    ("https://www.sortr.app/item/1", ResourceRef("item", 1)),
    ("sortr://shelf/5", None),
    ("sortr://item/abc", None),
    ("sortr://item/0", None),
    ("sortr://item/5/extra", None),
    ("http://sortr.app/box/7", None),
    ("https://evil.example/box/7", None),
    ("not a link", None),
])
def test_parse_deep_link(uri, expected):
    assert parse_deep_link(uri) == expected
