"""API tests for /api/suggestions."""
from sortr.services.suggestion_service import name_similarity


def _setup(client):
    garage = client.post("/api/locations", json={"name": "Garage"}).json()
    attic = client.post("/api/locations", json={"name": "Attic"}).json()
    tools = client.post("/api/boxes", json={"name": "Toolbox", "locationId": garage["id"]}).json()
    bin_ = client.post("/api/boxes", json={"name": "Bin", "locationId": garage["id"]}).json()
    spare = client.post("/api/boxes", json={"name": "Spare crate", "locationId": attic["id"]}).json()
    client.post("/api/boxes", json={"name": "Empty tub", "locationId": attic["id"]})
    client.post("/api/items", json={"name": "Claw hammer", "category": "Tools", "boxId": tools["id"]})
    client.post("/api/items", json={"name": "Sledge hammer", "category": "Tools", "boxId": tools["id"]})
    client.post("/api/items", json={"name": "Hammock", "category": "Camping", "boxId": bin_["id"]})
    client.post("/api/items", json={"name": "Spanner", "category": "Tools", "boxId": spare["id"]})
    return garage, attic, tools, spare


def test_category_from_keywords(client):
    res = client.get("/api/suggestions/category", params={"name": "USB charger"})
    assert res.status_code == 200
    suggestions = res.json()["suggestions"]
    assert suggestions == [{"category": "Electronics", "confidence": 0.8, "reason": "Contains keyword: charger"}]


def test_category_from_existing_items(client):
    _setup(client)
    suggestions = client.get("/api/suggestions/category?name=Hammock").json()["suggestions"]
    assert {s["category"]: s["confidence"] for s in suggestions} == {"Camping": 0.6}

    # keyword hits rank above history, at most three
    suggestions = client.get("/api/suggestions/category?name=hammer").json()["suggestions"]
    assert suggestions[0] == {"category": "Tools", "confidence": 0.8, "reason": "Contains keyword: hammer"}
    assert len(suggestions) == 1
    assert client.get("/api/suggestions/category").json() == {"suggestions": []}


def test_similar_items_share_category(client):
    _setup(client)
    items = {i["name"]: i for i in client.get("/api/items").json()["items"]}
    res = client.get(f"/api/suggestions/similar/{items['Claw hammer']['id']}")
    assert res.status_code == 200
    similar = res.json()["similar"]
    assert [s["name"] for s in similar][0] == "Sledge hammer"
    assert "Hammock" not in [s["name"] for s in similar]
    assert similar[0]["box"] == "Toolbox"
    assert similar[0]["location"] == "Garage"
    assert 0 < similar[0]["similarity"] <= 100


def test_similar_unknown_item(client):
    assert client.get("/api/suggestions/similar/999").status_code == 404


def test_duplicates(client):
    _setup(client)
    items = {i["name"]: i for i in client.get("/api/items").json()["items"]}
    dupes = client.get("/api/suggestions/duplicates", params={"name": "claw hammer"}).json()["duplicates"]
    assert [d["name"] for d in dupes] == ["Claw hammer"]
    assert dupes[0]["similarity"] == 100

    params = {"name": "claw hammer", "excludeId": items["Claw hammer"]["id"]}
    excluded = client.get("/api/suggestions/duplicates", params=params)
    assert excluded.json() == {"duplicates": []}
    assert client.get("/api/suggestions/duplicates?name=ha").json() == {"duplicates": []}


def test_empty_boxes(client):
    garage, attic, _, _ = _setup(client)
    boxes = client.get("/api/suggestions/empty-boxes").json()["emptyBoxes"]
    assert boxes == [{"id": boxes[0]["id"], "name": "Empty tub", "location": "Attic", "locationId": attic["id"]}]
    garage_only = client.get(f"/api/suggestions/empty-boxes?locationId={garage['id']}").json()
    assert garage_only == {"emptyBoxes": []}


def test_autocomplete(client):
    _setup(client)
    res = client.get("/api/suggestions/autocomplete?query=ham")
    assert res.json()["suggestions"] == [{"name": "Hammock", "category": "Camping"}]
    assert len(client.get("/api/suggestions/autocomplete?query=s&limit=5").json()["suggestions"]) == 0
    assert client.get("/api/suggestions/autocomplete?query=sp&limit=1").json()["suggestions"] == [
        {"name": "Spanner", "category": "Tools"},
    ]


def test_box_for_item(client):
    _, attic, tools, spare = _setup(client)
    suggestions = client.get("/api/suggestions/box-for-item?category=Tools").json()["suggestions"]
    assert [(s["boxId"], s["itemCount"]) for s in suggestions] == [(tools["id"], 2), (spare["id"], 1)]
    assert suggestions[0]["reason"] == "Already has 2 Tools items"
    assert suggestions[0]["location"] == "Garage"

    in_attic = client.get(f"/api/suggestions/box-for-item?category=Tools&locationId={attic['id']}").json()
    assert [s["boxName"] for s in in_attic["suggestions"]] == ["Spare crate"]
    assert client.get("/api/suggestions/box-for-item").json() == {"suggestions": []}


def test_name_similarity_ignores_case():
    assert name_similarity("Drill", "dRILL") == 1.0
    assert name_similarity("Drill", "Tent") < 0.3
