"""CSV/JSON/Excel export, CSV import, QR codes and inventory stats."""
import csv
import io

from openpyxl import load_workbook
from sortr.models.activity import ActivityAction, EntityType


def _seed(client):
    loc = client.post("/api/locations", json={"name": "Garage"}).json()
    box = client.post("/api/boxes", json={"name": "Toolbox", "locationId": loc["id"]}).json()
    client.post("/api/items", json={"name": "Hammer", "category": "Tools", "boxId": box["id"]})
    client.post("/api/items", json={"name": "Lamp", "category": "Lighting", "locationId": loc["id"]})
    return loc, box


def _csv_upload(text: str, filename: str = "items.csv"):
    return {"file": (filename, io.BytesIO(text.encode("utf-8")), "text/csv")}


def test_export_csv_with_filters(client):
    _seed(client)
    res = client.post("/api/export/csv", json={"filters": {"category": "Tools"}})
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert "attachment" in res.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(res.text)))
    assert rows[0][:3] == ["ID", "Name", "Category"]
    assert [r[1] for r in rows[1:]] == ["Hammer"]
    # boxed item reports the box's location
    assert rows[1][4] == "Garage"


def test_export_csv_tags_and_favorites(client):
    _seed(client)
    client.post("/api/items", json={
        "name": "Tent", "tags": ["camping", "summer"], "isFavorite": True, "expirationDate": "2031-05-01",
    })
    res = client.post("/api/export/csv", json={"filters": {"tag": "camping", "isFavorite": True}})
    rows = list(csv.DictReader(io.StringIO(res.text)))
    assert [r["Name"] for r in rows] == ["Tent"]
    assert rows[0]["Tags"] == "camping, summer"
    assert rows[0]["Favorite"] == "Yes"
    assert rows[0]["Expiration Date"] == "2031-05-01"

    backup = client.get("/api/export/json").json()["data"]["items"]
    tent = next(i for i in backup if i["name"] == "Tent")
    assert tent["tags"] == ["camping", "summer"]
    assert tent["isFavorite"] is True
    assert tent["expirationDate"] == "2031-05-01"


def test_import_tags_favorite_and_expiry(client):
    text = (
        "Name,Tags,Favorite,Expiration Date\n"
        'Tent,"camping, summer, camping",yes,2031-05-01\n'
        "Kettle,,,\n"
        "Stove,,maybe,\n"
        "Milk,,,31/12/2030\n"
    )
    res = client.post("/api/export/csv-import?preview=true", files=_csv_upload(text))
    data = res.json()
    assert [(e["row"], e["field"]) for e in data["errors"]] == [(4, "isFavorite"), (5, "expirationDate")]

    text = "\n".join(text.splitlines()[:3]) + "\n"
    assert client.post("/api/export/csv-import", files=_csv_upload(text)).json()["imported"] == 2
    items = {i["name"]: i for i in client.get("/api/items").json()["items"]}
    assert items["Tent"]["tags"] == ["camping", "summer"]
    assert items["Tent"]["isFavorite"] is True
    assert items["Tent"]["expirationDate"] == "2031-05-01"
    assert items["Kettle"]["tags"] == []
    assert items["Kettle"]["isFavorite"] is False


def test_export_csv_without_body(client):
    _seed(client)
    res = client.post("/api/export/csv")
    assert res.status_code == 200
    assert len(list(csv.reader(io.StringIO(res.text)))) == 3


def test_template_is_importable(client):
    loc, box = _seed(client)
    template = client.get("/api/export/template")
    assert template.status_code == 200
    assert template.text.splitlines()[0] == "Name,Category,Description,Box ID,Location ID,Tags,Favorite,Expiration Date"

    text = f"Name,Category,Description,Box ID,Location ID\nSaw,Tools,,{box['id']},{loc['id']}\n"
    res = client.post("/api/export/csv-import", files=_csv_upload(text))
    assert res.status_code == 200
    assert res.json()["imported"] == 1


def test_import_preview_reports_errors(client):
    _, box = _seed(client)
    text = f"name,category,boxId\nSaw,Tools,{box['id']}\n,Tools,\nPliers,Tools,999\nWrench,Tools,abc\n"
    res = client.post("/api/export/csv-import?preview=true", files=_csv_upload(text))
    assert res.status_code == 200
    data = res.json()
    assert data["preview"] is True
    assert data["totalRows"] == 4
    assert data["validRows"] == 1
    assert [(e["row"], e["field"]) for e in data["errors"]] == [(3, "name"), (4, "boxId"), (5, "boxId")]
    assert data["sampleRows"][0]["name"] == "Saw"
    # preview writes nothing
    assert client.get("/api/items").json()["total"] == 2


def test_import_places_rows_where_their_box_is(client):
    loc, box = _seed(client)
    attic = client.post("/api/locations", json={"name": "Attic"}).json()
    text = f"Name,Box ID,Location ID\nSaw,{box['id']},\nPliers,{box['id']},{attic['id']}\n"
    res = client.post("/api/export/csv-import?preview=true", files=_csv_upload(text))
    data = res.json()
    assert [(e["row"], e["field"]) for e in data["errors"]] == [(3, "locationId")]
    assert data["sampleRows"][0]["locationId"] == loc["id"]


def test_import_is_all_or_nothing(client):
    _seed(client)
    text = "Name,Box ID\nSaw,\nPliers,999\n"
    res = client.post("/api/export/csv-import", files=_csv_upload(text))
    assert res.status_code == 400
    body = res.json()
    assert body["detail"] == "Found 1 errors. Fix them and try again."
    assert body["errors"][0]["row"] == 3
    assert client.get("/api/items").json()["total"] == 2


def test_import_logs_one_activity_per_item(client, activities):
    text = "Name,Category\nSaw,Tools\nPliers,Tools\n"
    res = client.post("/api/export/csv-import", files=_csv_upload(text))
    assert res.json() == {"success": True, "imported": 2, "message": "Successfully imported 2 items"}
    rows = [a for a in activities() if a.entity_type == EntityType.item]
    assert sorted(a.entity_name for a in rows) == ["Pliers", "Saw"]
    assert all(a.action == ActivityAction.create for a in rows)


def test_import_rejects_non_csv(client):
    res = client.post("/api/export/csv-import", files={"file": ("items.pdf", io.BytesIO(b"%PDF"), "application/pdf")})
    assert res.status_code == 400


def test_import_requires_name_column(client):
    res = client.post("/api/export/csv-import", files=_csv_upload("Category\nTools\n"))
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "file"


def test_json_backup(client):
    _seed(client)
    client.post("/api/categories", json={"name": "Tools"})
    res = client.get("/api/export/json")
    assert res.status_code == 200
    assert "attachment" in res.headers["content-disposition"]
    data = res.json()
    assert data["version"] == "1.0"
    assert [loc["name"] for loc in data["data"]["locations"]] == ["Garage"]
    assert len(data["data"]["items"]) == 2
    assert data["data"]["boxes"][0]["locationId"] == data["data"]["locations"][0]["id"]
    assert [c["name"] for c in data["data"]["categories"]] == ["Tools"]


def test_excel_export(client):
    _seed(client)
    res = client.get("/api/export/excel")
    assert res.status_code == 200
    wb = load_workbook(io.BytesIO(res.content))
    assert wb.sheetnames == ["Items", "Boxes", "Locations"]
    assert wb["Items"].max_row == 3
    assert wb["Boxes"]["D2"].value == 1


def test_qr_png(client):
    _, box = _seed(client)
    res = client.get(f"/api/qr/box/{box['id']}")
    assert res.status_code == 200
    assert res.headers["content-type"] == "image/png"
    assert res.content.startswith(b"\x89PNG")


def test_qr_unknown_resource(client):
    assert client.get("/api/qr/item/999").status_code == 404
    assert client.get("/api/qr/shelf/1").status_code == 400


def test_qr_batch_pdf(client):
    loc, _ = _seed(client)
    res = client.get(f"/api/qr/batch?kind=location&ids={loc['id']},999")
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert res.content.startswith(b"%PDF")


def test_qr_batch_needs_ids(client):
    assert client.get("/api/qr/batch?ids=x,y").status_code == 400


def test_deep_link_format():
    from sortr.schemas.share import ResourceRef
    from sortr.services.qr_service import deep_link

    assert deep_link(ResourceRef(kind="item", id=5)) == "sortr://item/5"


def test_inventory_stats(client):
    loc, _ = _seed(client)
    client.post("/api/boxes", json={"name": "Empty bin", "locationId": loc["id"]})
    res = client.get("/api/stats")
    assert res.status_code == 200
    data = res.json()
    overview = data["overview"]
    assert overview["totalItems"] == 2
    assert overview["totalBoxes"] == 2
    assert overview["itemsWithoutBox"] == 1
    assert overview["emptyBoxesCount"] == 1
    assert overview["boxUtilization"] == 50.0
    assert [b["name"] for b in data["emptyBoxes"]] == ["Empty bin"]
    assert data["topBoxes"][0] == {"id": data["topBoxes"][0]["id"], "name": "Toolbox", "location": "Garage", "count": 1}
    assert {c["category"] for c in data["itemsByCategory"]} == {"Tools", "Lighting"}
    assert len(data["recentActivity"]) == 5
