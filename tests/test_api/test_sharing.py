"""Shares, notifications and comments."""


def _item(client, name="Tent"):
    return client.post("/api/items", json={"name": name}).json()


def test_share_notifies_recipient(client, make_user):
    bob_id, bob = make_user("bob")
    item = _item(client)

    res = client.post("/api/shares", json={"userId": bob_id, "resourceType": "item", "resourceId": item["id"]})
    assert res.status_code == 201
    share = res.json()
    assert share["permission"] == "view"
    assert share["sharedByUserId"] == 1

    mine = client.get("/api/shares", headers=bob).json()
    assert len(mine) == 1
    assert mine[0]["resource"] == {"id": item["id"], "name": "Tent"}

    assert client.get("/api/notifications/unread/count", headers=bob).json() == {"count": 1}
    note = client.get("/api/notifications", headers=bob).json()[0]
    assert note["type"] == "share"
    assert note["resourceType"] == "item"
    assert note["resourceId"] == item["id"]


def test_reshare_updates_permission_without_new_notification(client, make_user):
    bob_id, bob = make_user("bob")
    item = _item(client)
    body = {"userId": bob_id, "resourceType": "item", "resourceId": item["id"]}
    first = client.post("/api/shares", json=body).json()
    second = client.post("/api/shares", json={**body, "permission": "edit"}).json()

    assert second["id"] == first["id"]
    assert second["permission"] == "edit"
    assert len(client.get("/api/notifications", headers=bob).json()) == 1


def test_share_unknown_resource(client, make_user):
    bob_id, _ = make_user("bob")
    res = client.post("/api/shares", json={"userId": bob_id, "resourceType": "box", "resourceId": 9})
    assert res.status_code == 404
    res = client.post("/api/shares", json={"userId": bob_id, "resourceType": "shelf", "resourceId": 9})
    assert res.status_code == 400


def test_resource_shares_and_delete(client, make_user):
    bob_id, bob = make_user("bob")
    carol_id, carol = make_user("carol")
    item = _item(client)
    share = client.post("/api/shares", json={"userId": bob_id, "resourceType": "item", "resourceId": item["id"]}).json()

    listed = client.get(f"/api/shares/resource/item/{item['id']}").json()
    assert [s["user"]["username"] for s in listed] == ["bob"]

    assert client.delete(f"/api/shares/{share['id']}", headers=carol).status_code == 403
    assert client.delete(f"/api/shares/{share['id']}").status_code == 200
    assert client.get("/api/shares", headers=bob).json() == []


def test_notifications_owner_only(client, make_user):
    bob_id, bob = make_user("bob")
    _, carol = make_user("carol")
    item = _item(client)
    client.post("/api/shares", json={"userId": bob_id, "resourceType": "item", "resourceId": item["id"]})
    note_id = client.get("/api/notifications", headers=bob).json()[0]["id"]

    assert client.put(f"/api/notifications/{note_id}/read", headers=carol).status_code == 403
    res = client.put(f"/api/notifications/{note_id}/read", headers=bob)
    assert res.json()["isRead"] is True
    assert client.get("/api/notifications?unreadOnly=true", headers=bob).json() == []

    assert client.delete(f"/api/notifications/{note_id}", headers=bob).status_code == 200
    assert client.get("/api/notifications", headers=bob).json() == []


def test_mark_all_read(client, make_user):
    bob_id, bob = make_user("bob")
    for name in ("Tent", "Stove"):
        item = _item(client, name)
        client.post("/api/shares", json={"userId": bob_id, "resourceType": "item", "resourceId": item["id"]})
    res = client.put("/api/notifications/read-all", headers=bob)
    assert res.status_code == 200
    assert "2" in res.json()["message"]
    assert client.get("/api/notifications/unread/count", headers=bob).json() == {"count": 0}


def test_comment_notifies_sharees_but_not_author(client, make_user):
    bob_id, bob = make_user("bob")
    item = _item(client)
    client.post("/api/shares", json={"userId": bob_id, "resourceType": "item", "resourceId": item["id"]})
    client.put("/api/notifications/read-all", headers=bob)

    res = client.post("/api/comments", json={"itemId": item["id"], "content": "  Needs new pegs  "})
    assert res.status_code == 201
    assert res.json()["content"] == "Needs new pegs"

    notes = client.get("/api/notifications?unreadOnly=true", headers=bob).json()
    assert len(notes) == 1
    assert notes[0]["type"] == "comment"
    assert client.get("/api/notifications/unread/count").json() == {"count": 0}


def test_comment_edit_and_delete_permissions(client, make_user):
    _, bob = make_user("bob")
    item = _item(client)
    comment = client.post("/api/comments", json={"itemId": item["id"], "content": "mine"}, headers=bob).json()

    assert client.put(f"/api/comments/{comment['id']}", json={"content": "hijack"}).status_code == 403
    res = client.put(f"/api/comments/{comment['id']}", json={"content": "edited"}, headers=bob)
    assert res.json()["content"] == "edited"

    thread = client.get(f"/api/comments/item/{item['id']}").json()
    assert [(c["content"], c["user"]["username"]) for c in thread] == [("edited", "bob")]

    # admins may delete anyone's comment
    assert client.delete(f"/api/comments/{comment['id']}").status_code == 200
    assert client.get(f"/api/comments/item/{item['id']}").json() == []


def test_empty_comment_rejected(client):
    item = _item(client)
    res = client.post("/api/comments", json={"itemId": item["id"], "content": "   "})
    assert res.status_code == 400
