"""
Export service: CSV/Excel/JSON exports and CSV bulk import of items.
"""
import csv
import io
import logging
from datetime import date, datetime, timezone
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import String, cast, select
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter

from sortr.errors import ValidationFailed
from sortr.models.box import Box
from sortr.models.category import Category
from sortr.models.item import Item
from sortr.models.location import Location
from sortr.schemas.box import BoxResponse
from sortr.schemas.category import CategoryResponse
from sortr.schemas.export import ExportFilters, ImportPreview, ImportRow, ImportRowError, JsonBackup
from sortr.schemas.item import ItemResponse, unique_tags
from sortr.schemas.location import LocationResponse

logger = logging.getLogger(__name__)

EXPORT_HEADERS = [
    "ID", "Name", "Category", "Description", "Location", "Box", "Box ID", "Location ID",
    "Tags", "Favorite", "Expiration Date", "Created At", "Updated At",
]
TEMPLATE_HEADERS = ["Name", "Category", "Description", "Box ID", "Location ID", "Tags", "Favorite", "Expiration Date"]

# Header text (lowercase, no spaces) -> import field
_COL_MAP = {
    "name": "name",
    "category": "category",
    "description": "description",
    "boxid": "box_id",
    "box_id": "box_id",
    "locationid": "location_id",
    "location_id": "location_id",
    "tags": "tags",
    "favorite": "is_favorite",
    "isfavorite": "is_favorite",
    "expirationdate": "expiration_date",
    "expiration_date": "expiration_date",
}

MAX_IMPORT_BYTES = 10 * 1024 * 1024
_IMPORT_MAX_ROWS = 2000
_PREVIEW_SAMPLE = 5

# import field -> name reported in row errors
_ERROR_FIELD = {"box_id": "boxId", "location_id": "locationId"}

_TRUE = {"1", "true", "yes", "y", "x"}
_FALSE = {"", "0", "false", "no", "n"}


def _normalize(header: str) -> str:
    return str(header).lower().replace(" ", "").strip().rstrip("*")


def _item_location_name(item: Item) -> str:
    if item.box is not None and item.box.location is not None:
        return item.box.location.name
    if item.location is not None:
        return item.location.name
    return ""


def _filtered_items(db: Session, filters: ExportFilters | None) -> list[Item]:
    query = (
        select(Item)
        .options(selectinload(Item.box).selectinload(Box.location), selectinload(Item.location))
        .order_by(Item.name)
    )
    if filters:
        if filters.category:
            query = query.where(Item.category == filters.category)
        if filters.box_id:
            query = query.where(Item.box_id == filters.box_id)
        if filters.location_id:
            query = query.where(Item.location_id == filters.location_id)
        if filters.tag:
            query = query.where(cast(Item.tags, String).ilike(f'%"{filters.tag}"%'))
        if filters.is_favorite is not None:
            query = query.where(Item.is_favorite == filters.is_favorite)
    return db.scalars(query).all()


def _tags_cell(item: Item) -> str:
    return ", ".join(item.tags or [])


def export_items_csv(db: Session, filters: ExportFilters | None = None) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(EXPORT_HEADERS)
    for item in _filtered_items(db, filters):
        writer.writerow([
            item.id,
            item.name,
            item.category or "",
            item.description or "",
            _item_location_name(item),
            item.box.name if item.box else "",
            item.box_id or "",
            item.location_id or "",
            _tags_cell(item),
            "Yes" if item.is_favorite else "No",
            item.expiration_date.isoformat() if item.expiration_date else "",
            item.created_at.isoformat(),
            item.updated_at.isoformat(),
        ])
    return buf.getvalue()


def import_template_csv() -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(TEMPLATE_HEADERS)
    writer.writerow(["Example Item 1", "Electronics", "A sample electronic item", "1", "1", "cables, spare", "No", ""])
    writer.writerow(["Example Item 2", "Tools", "A sample tool", "2", "1", "", "Yes", "2030-12-31"])
    return buf.getvalue()


def parse_csv(data: bytes) -> list[dict[str, str]]:
    """Decode an uploaded CSV into rows keyed by import field name."""
    if len(data) > MAX_IMPORT_BYTES:
        raise ValidationFailed.for_field("file", "File is larger than 10 MB")
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationFailed.for_field("file", "File must be UTF-8 encoded CSV")

    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames or "name" not in {_COL_MAP.get(_normalize(h)) for h in reader.fieldnames}:
        raise ValidationFailed.for_field("file", "Missing required column 'Name'")

    rows = []
    for raw in reader:
        if len(rows) >= _IMPORT_MAX_ROWS:
            raise ValidationFailed.for_field("file", f"Too many rows. Maximum is {_IMPORT_MAX_ROWS}.")
        row = {}
        for header, value in raw.items():
            field = _COL_MAP.get(_normalize(header)) if header is not None else None
            if field:
                row[field] = (value or "").strip()
        rows.append(row)
    return rows


def _parse_ref(db: Session, row_num: int, row: dict, field: str, model, label: str, errors: list) -> tuple[bool, int | None]:
    raw = row.get(field, "")
    if not raw:
        return True, None
    try:
        ref_id = int(raw)
    except ValueError:
        errors.append(ImportRowError(row=row_num, field=_ERROR_FIELD[field], message=f"{label} ID must be a number"))
        return False, None
    if not db.get(model, ref_id):
        errors.append(ImportRowError(row=row_num, field=_ERROR_FIELD[field], message=f"{label} with ID {ref_id} not found"))
        return False, None
    return True, ref_id


def validate_rows(db: Session, rows: list[dict[str, str]]) -> tuple[list[ImportRow], list[ImportRowError]]:
    valid: list[ImportRow] = []
    errors: list[ImportRowError] = []
    for i, row in enumerate(rows):
        row_num = i + 2  # header is row 1
        if not row.get("name"):
            errors.append(ImportRowError(row=row_num, field="name", message="Name is required"))
            continue
        ok_box, box_id = _parse_ref(db, row_num, row, "box_id", Box, "Box", errors)
        if not ok_box:
            continue
        ok_loc, location_id = _parse_ref(db, row_num, row, "location_id", Location, "Location", errors)
        if not ok_loc:
            continue
        if box_id is not None:
            box_location = db.get(Box, box_id).location_id
            if location_id is not None and location_id != box_location:
                errors.append(ImportRowError(
                    row=row_num, field="locationId", message=f"Box {box_id} is in location {box_location}",
                ))
                continue
            location_id = box_location
        favorite = row.get("is_favorite", "").lower()
        if favorite not in _TRUE | _FALSE:
            errors.append(ImportRowError(row=row_num, field="isFavorite", message="Favorite must be yes or no"))
            continue
        expiration = row.get("expiration_date", "")
        try:
            expiration_date = date.fromisoformat(expiration) if expiration else None
        except ValueError:
            errors.append(ImportRowError(
                row=row_num, field="expirationDate", message="Expiration date must be YYYY-MM-DD",
            ))
            continue
        valid.append(ImportRow(
            name=row["name"][:255],
            category=row.get("category") or None,
            description=row.get("description") or None,
            box_id=box_id,
            location_id=location_id,
            tags=unique_tags([t.strip()[:50] for t in row.get("tags", "").split(",") if t.strip()]) or None,
            is_favorite=favorite in _TRUE,
            expiration_date=expiration_date,
        ))
    return valid, errors


def preview_import(db: Session, rows: list[dict[str, str]]) -> ImportPreview:
    valid, errors = validate_rows(db, rows)
    return ImportPreview(
        total_rows=len(rows),
        valid_rows=len(valid),
        error_count=len(errors),
        errors=errors,
        sample_rows=valid[:_PREVIEW_SAMPLE],
    )


def import_items(db: Session, rows: list[dict[str, str]]) -> list[Item]:
    """All-or-nothing: any invalid row rejects the whole file."""
    valid, errors = validate_rows(db, rows)
    if errors:
        raise ValidationFailed(
            [e.model_dump() for e in errors],
            detail=f"Found {len(errors)} errors. Fix them and try again.",
        )
    items = [Item(**row.model_dump()) for row in valid]
    db.add_all(items)
    db.commit()
    for item in items:
        db.refresh(item)
    logger.info("Imported %d items from CSV", len(items))
    return items


def export_json(db: Session) -> JsonBackup:
    def dump(schema, rows):
        return [schema.model_validate(r).model_dump(mode="json", by_alias=True) for r in rows]

    return JsonBackup(
        export_date=datetime.now(timezone.utc).isoformat(),
        data={
            "locations": dump(LocationResponse, db.scalars(select(Location).order_by(Location.id)).all()),
            "boxes": dump(BoxResponse, db.scalars(select(Box).options(selectinload(Box.location)).order_by(Box.id)).all()),
            "items": dump(ItemResponse, _filtered_items(db, None)),
            "categories": dump(CategoryResponse, db.scalars(select(Category).order_by(Category.name)).all()),
        },
    )


def _header(ws, headers: list[str], widths: list[int]) -> None:
    header_fill = PatternFill(start_color="1C2D42", end_color="1C2D42", fill_type="solid")
    header_font = Font(bold=True, color="F5A623", size=11)
    for col, h in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col, value=h)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")
    for i, w in enumerate(widths, 1):
        ws.column_dimensions[get_column_letter(i)].width = w
    ws.row_dimensions[1].height = 22
    ws.freeze_panes = "A2"


def export_items_excel(db: Session) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Items"
    _header(ws, EXPORT_HEADERS[:12], [6, 32, 20, 40, 24, 20, 8, 10, 24, 9, 14, 18])
    for row_num, item in enumerate(_filtered_items(db, None), 2):
        ws.cell(row=row_num, column=1, value=item.id)
        ws.cell(row=row_num, column=2, value=item.name)
        ws.cell(row=row_num, column=3, value=item.category or "")
        ws.cell(row=row_num, column=4, value=item.description or "")
        ws.cell(row=row_num, column=5, value=_item_location_name(item))
        ws.cell(row=row_num, column=6, value=item.box.name if item.box else "")
        ws.cell(row=row_num, column=7, value=item.box_id)
        ws.cell(row=row_num, column=8, value=item.location_id)
        ws.cell(row=row_num, column=9, value=_tags_cell(item))
        ws.cell(row=row_num, column=10, value="Yes" if item.is_favorite else "No")
        ws.cell(row=row_num, column=11, value=item.expiration_date)
        ws.cell(row=row_num, column=12, value=item.created_at.strftime("%Y-%m-%d %H:%M"))

    ws2 = wb.create_sheet("Boxes")
    _header(ws2, ["ID", "Name", "Location", "Items"], [6, 32, 24, 8])
    boxes = db.scalars(select(Box).options(selectinload(Box.location), selectinload(Box.items)).order_by(Box.name)).all()
    for row_num, box in enumerate(boxes, 2):
        ws2.cell(row=row_num, column=1, value=box.id)
        ws2.cell(row=row_num, column=2, value=box.name)
        ws2.cell(row=row_num, column=3, value=box.location.name if box.location else "")
        ws2.cell(row=row_num, column=4, value=len(box.items))

    ws3 = wb.create_sheet("Locations")
    _header(ws3, ["ID", "Name", "Parent ID"], [6, 32, 10])
    for row_num, loc in enumerate(db.scalars(select(Location).order_by(Location.name)).all(), 2):
        ws3.cell(row=row_num, column=1, value=loc.id)
        ws3.cell(row=row_num, column=2, value=loc.name)
        ws3.cell(row=row_num, column=3, value=loc.parent_id)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
