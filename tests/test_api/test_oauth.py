"""Mobile OAuth token exchange against mocked providers."""
import httpx
import pytest
from sortr.services.oauth_service import get_oauth_http_client


def _use_transport(app, handler):
    async def override():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            yield client

    app.dependency_overrides[get_oauth_http_client] = override


def github_handler(request: httpx.Request) -> httpx.Response:
    if request.headers.get("Authorization") != "Bearer good-token":
        return httpx.Response(401, json={"message": "Bad credentials"})
    if request.url.path == "/user":
        return httpx.Response(200, json={"id": 4242, "login": "octo", "name": "Octo Cat", "email": None})
    if request.url.path == "/user/emails":
        return httpx.Response(200, json=[
            {"email": "old@example.com", "primary": False, "verified": True},
            {"email": "octo@example.com", "primary": True, "verified": True},
        ])
    return httpx.Response(404)


def test_github_creates_user_once(app, anon_client):
    _use_transport(app, github_handler)
    res = anon_client.post("/api/auth/github-mobile", json={"accessToken": "good-token"})
    assert res.status_code == 200
    user = res.json()["user"]
    assert user["username"] == "octo"
    assert user["email"] == "octo@example.com"
    # first account in the system
    assert user["isAdmin"] is True

    again = anon_client.post("/api/auth/github-mobile", json={"accessToken": "good-token"})
    assert again.status_code == 200
    assert again.json()["user"]["id"] == user["id"]


def test_github_rejected_token(app, anon_client):
    _use_transport(app, github_handler)
    res = anon_client.post("/api/auth/github-mobile", json={"accessToken": "bad-token"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid GitHub token"


def test_missing_access_token(app, anon_client):
    _use_transport(app, github_handler)
    res = anon_client.post("/api/auth/microsoft-mobile", json={})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "accessToken"


def test_google_audience_checked(app, anon_client, settings):
    settings.GOOGLE_CLIENT_ID = "sortr-client"

    def handler(request):
        return httpx.Response(200, json={"sub": "g-1", "aud": "someone-else", "email": "g@example.com"})

    _use_transport(app, handler)
    res = anon_client.post("/api/auth/google-mobile", json={"idToken": "abc"})
    assert res.status_code == 401


def test_google_links_existing_email(app, client):
    client.put("/api/me", json={"email": "admin@example.com"})

    def handler(request):
        assert request.url.params["id_token"] == "abc"
        return httpx.Response(200, json={"sub": "g-1", "email": "admin@example.com", "name": "Admin"})

    _use_transport(app, handler)
    res = client.post("/api/auth/google-mobile", json={"idToken": "abc"})
    assert res.status_code == 200
    assert res.json()["user"]["username"] == "admin"


@pytest.mark.parametrize("exc", [httpx.ConnectError("down"), httpx.ReadTimeout("slow")])
def test_provider_unreachable_is_502(app, anon_client, exc):
    def handler(request):
        raise exc

    _use_transport(app, handler)
    res = anon_client.post("/api/auth/github-mobile", json={"accessToken": "good-token"})
    assert res.status_code == 502
