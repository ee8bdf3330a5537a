"""API tests for /api/items, including moves and images."""
import io
import os

from sortr.models.activity import ActivityAction, EntityType

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _setup(client):
    loc = client.post("/api/locations", json={"name": "Garage"}).json()
    box = client.post("/api/boxes", json={"name": "Toolbox", "locationId": loc["id"]}).json()
    return loc, box


def test_create_update_clear_box(client, activities):
    _, box = _setup(client)
    res = client.post("/api/items", json={"name": "Drill", "boxId": box["id"]})
    assert res.status_code == 201
    item_id = res.json()["id"]

    fetched = client.get(f"/api/items/{item_id}").json()
    assert fetched["name"] == "Drill"
    assert fetched["boxId"] == box["id"]

    res = client.put(f"/api/items/{item_id}", json={"boxId": None})
    assert res.status_code == 200
    assert client.get(f"/api/items/{item_id}").json()["boxId"] is None

    update = [a for a in activities() if a.action == ActivityAction.update]
    assert len(update) == 1
    assert update[0].entity_type == EntityType.item
    assert update[0].entity_id == item_id
    assert update[0].changes == {"fields": ["boxId"]}


def test_create_item_missing_box(client):
    res = client.post("/api/items", json={"name": "Drill", "boxId": 7})
    assert res.status_code == 404
    assert res.json()["detail"] == "Box 7 not found"


def test_item_name_required(client):
    res = client.post("/api/items", json={"category": "Tools"})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "name"


def test_get_item_not_found(client):
    assert client.get("/api/items/99999").status_code == 404


def test_filters(client):
    loc, box = _setup(client)
    client.post("/api/items", json={"name": "Hammer", "category": "Tools", "boxId": box["id"]})
    client.post("/api/items", json={"name": "Lamp", "category": "Lighting", "locationId": loc["id"]})
    client.post("/api/items", json={"name": "Blanket", "description": "warm wool"})

    def names(query):
        return sorted(i["name"] for i in client.get(f"/api/items?{query}").json()["items"])

    assert names("search=wool") == ["Blanket"]
    assert names("category=Tools") == ["Hammer"]
    assert names(f"boxId={box['id']}") == ["Hammer"]
    # boxed at the location counts as being there
    assert names(f"locationId={loc['id']}") == ["Hammer", "Lamp"]
    assert names("orphaned=true") == ["Blanket", "Lamp"]
    assert names("orphaned=false") == ["Hammer"]


def test_tags_and_favorites(client):
    res = client.post("/api/items", json={"name": "Tent", "tags": [" camping ", "Summer", "camping"], "isFavorite": True})
    assert res.status_code == 201
    tent = res.json()
    assert tent["tags"] == ["camping", "Summer"]
    assert tent["isFavorite"] is True
    plain = client.post("/api/items", json={"name": "Kettle"}).json()
    assert plain["tags"] == []
    assert plain["isFavorite"] is False
    client.post("/api/items", json={"name": "Campingaz stove", "tags": ["campingaz"]})

    def names(query):
        return sorted(i["name"] for i in client.get(f"/api/items?{query}").json()["items"])

    # whole-tag match, case-insensitive
    assert names("tag=CAMPING") == ["Tent"]
    assert names("isFavorite=true") == ["Tent"]
    assert names("isFavorite=false") == ["Campingaz stove", "Kettle"]
    assert names("search=summer") == ["Tent"]

    res = client.put(f"/api/items/{tent['id']}", json={"tags": None, "isFavorite": False})
    assert res.status_code == 200
    assert res.json()["tags"] == []
    assert res.json()["isFavorite"] is False


def test_favorite_cannot_be_null(client):
    item = client.post("/api/items", json={"name": "Tent"}).json()
    res = client.put(f"/api/items/{item['id']}", json={"isFavorite": None})
    assert res.status_code == 400


def test_expiration_date_round_trips(client):
    res = client.post("/api/items", json={"name": "Milk", "expirationDate": "2030-02-01"})
    assert res.status_code == 201
    assert res.json()["expirationDate"] == "2030-02-01"
    assert client.post("/api/items", json={"name": "Milk", "expirationDate": "soon"}).status_code == 400


def test_move_item_into_box_takes_box_location(client, activities):
    loc, box = _setup(client)
    item = client.post("/api/items", json={"name": "Saw"}).json()

    res = client.post(f"/api/items/{item['id']}/move", json={"boxId": box["id"]})
    assert res.status_code == 200
    data = res.json()
    assert data["boxId"] == box["id"]
    assert data["locationId"] == loc["id"]

    move = [a for a in activities() if a.action == ActivityAction.move][0]
    assert move.changes == {
        "from": {"boxId": None, "locationId": None},
        "to": {"boxId": box["id"], "locationId": loc["id"]},
    }


def test_move_requires_a_target(client):
    item = client.post("/api/items", json={"name": "Saw"}).json()
    res = client.post(f"/api/items/{item['id']}/move", json={})
    assert res.status_code == 400


def test_boxed_item_takes_box_location(client):
    loc, box = _setup(client)
    res = client.post("/api/items", json={"name": "Drill", "boxId": box["id"]})
    assert res.status_code == 201
    assert res.json()["locationId"] == loc["id"]

    loose = client.post("/api/items", json={"name": "Rope"}).json()
    res = client.put(f"/api/items/{loose['id']}", json={"boxId": box["id"]})
    assert res.json()["locationId"] == loc["id"]


def test_box_and_location_must_agree(client):
    _, box = _setup(client)
    attic = client.post("/api/locations", json={"name": "Attic"}).json()

    res = client.post("/api/items", json={"name": "Drill", "boxId": box["id"], "locationId": attic["id"]})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "locationId"

    item = client.post("/api/items", json={"name": "Drill", "boxId": box["id"]}).json()
    res = client.put(f"/api/items/{item['id']}", json={"locationId": attic["id"]})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "locationId"


def test_move_to_other_location_leaves_box(client):
    _, box = _setup(client)
    attic = client.post("/api/locations", json={"name": "Attic"}).json()
    item = client.post("/api/items", json={"name": "Drill", "boxId": box["id"]}).json()

    res = client.post(f"/api/items/{item['id']}/move", json={"locationId": attic["id"]})
    assert res.status_code == 200
    assert res.json()["boxId"] is None
    assert res.json()["locationId"] == attic["id"]

    res = client.post(f"/api/items/{item['id']}/move", json={"boxId": box["id"], "locationId": attic["id"]})
    assert res.status_code == 400


def test_upload_and_delete_images(client, settings, activities):
    item = client.post("/api/items", json={"name": "Camera"}).json()
    files = [
        ("images", ("front.png", io.BytesIO(PNG_BYTES), "image/png")),
        ("images", ("back.png", io.BytesIO(PNG_BYTES), "image/png")),
    ]
    res = client.post(f"/api/items/{item['id']}/images", files=files)
    assert res.status_code == 200
    images = res.json()["images"]
    assert len(images) == 2
    assert all(name.startswith("item-") and name.endswith(".png") for name in images)
    assert all(os.path.exists(os.path.join(settings.UPLOAD_DIR, name)) for name in images)

    res = client.delete(f"/api/items/{item['id']}/images/{images[0]}")
    assert res.status_code == 200
    assert res.json()["images"] == [images[1]]
    assert not os.path.exists(os.path.join(settings.UPLOAD_DIR, images[0]))

    actions = [a.action for a in activities()]
    assert ActivityAction.upload_image in actions
    assert ActivityAction.delete_image in actions


def test_upload_rejects_non_images(client):
    item = client.post("/api/items", json={"name": "Camera"}).json()
    files = [("images", ("notes.txt", io.BytesIO(b"hello"), "text/plain"))]
    res = client.post(f"/api/items/{item['id']}/images", files=files)
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "images"


def test_upload_limit_five_images(client):
    item = client.post("/api/items", json={"name": "Camera"}).json()
    files = [("images", (f"{n}.jpg", io.BytesIO(PNG_BYTES), "image/jpeg")) for n in range(6)]
    res = client.post(f"/api/items/{item['id']}/images", files=files)
    assert res.status_code == 400
    assert client.get(f"/api/items/{item['id']}").json()["images"] == []


def test_delete_unknown_image(client):
    item = client.post("/api/items", json={"name": "Camera"}).json()
    assert client.delete(f"/api/items/{item['id']}/images/nope.png").status_code == 404


def test_delete_item_removes_images(client, settings):
    item = client.post("/api/items", json={"name": "Camera"}).json()
    files = [("images", ("a.png", io.BytesIO(PNG_BYTES), "image/png"))]
    stored = client.post(f"/api/items/{item['id']}/images", files=files).json()["images"][0]

    res = client.delete(f"/api/items/{item['id']}")
    assert res.status_code == 200
    assert res.json()["name"] == "Camera"
    assert client.get(f"/api/items/{item['id']}").status_code == 404
    assert not os.path.exists(os.path.join(settings.UPLOAD_DIR, stored))
