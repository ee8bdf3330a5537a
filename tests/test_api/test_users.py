"""Admin user management under /api/users."""
from sortr.models.activity import ActivityAction, EntityType


def test_create_and_list_users(client, activities):
    res = client.post("/api/users", json={"username": "bob", "password": "secret123", "email": "bob@example.com"})
    assert res.status_code == 201
    assert res.json()["isAdmin"] is False
    assert "hashedPassword" not in res.json()

    data = client.get("/api/users").json()
    assert data["total"] == 2
    assert {u["username"] for u in data["items"]} == {"admin", "bob"}

    rows = activities()
    assert (rows[0].entity_type, rows[0].action, rows[0].entity_name) == (EntityType.user, ActivityAction.create, "bob")


def test_duplicate_email_conflict(client):
    client.post("/api/users", json={"username": "bob", "password": "secret123", "email": "x@example.com"})
    res = client.post("/api/users", json={"username": "rob", "password": "secret123", "email": "x@example.com"})
    assert res.status_code == 409


def test_promote_and_demote(client):
    bob = client.post("/api/users", json={"username": "bob", "password": "secret123"}).json()
    res = client.put(f"/api/users/{bob['id']}", json={"isAdmin": True})
    assert res.json()["isAdmin"] is True
    res = client.put("/api/users/1", json={"isAdmin": False})
    assert res.status_code == 200
    assert res.json()["isAdmin"] is False


def test_cannot_demote_last_admin(client):
    res = client.put("/api/users/1", json={"isAdmin": False})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "isAdmin"


def test_cannot_delete_self(client):
    res = client.delete("/api/users/1")
    assert res.status_code == 400


def test_delete_user(client, activities):
    bob = client.post("/api/users", json={"username": "bob", "password": "secret123"}).json()
    res = client.delete(f"/api/users/{bob['id']}")
    assert res.status_code == 200
    assert res.json()["username"] == "bob"
    assert client.get(f"/api/users/{bob['id']}").status_code == 404
    assert activities()[-1].changes["deleted"]["username"] == "bob"


def test_blank_password_update_is_ignored(client):
    bob = client.post("/api/users", json={"username": "bob", "password": "secret123"}).json()
    res = client.put(f"/api/users/{bob['id']}", json={"password": "", "displayName": "Bob"})
    assert res.status_code == 200
    assert client.post("/api/login", json={"username": "bob", "password": "secret123"}).status_code == 200
