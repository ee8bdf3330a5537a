from datetime import date
from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, UploadFile
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session
from sortr.activity import ActivitySink, get_activity_sink, record_bulk
from sortr.database import get_db
from sortr.errors import ValidationFailed
from sortr.models.activity import ActivityAction, EntityType
from sortr.schemas.export import CsvExportRequest, ImportPreview, ImportResult
from sortr.security import Identity, get_current_identity
import sortr.services.export_service as svc

router = APIRouter(prefix="/api/export", tags=["export"], dependencies=[Depends(get_current_identity)])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f"attachment; filename={filename}"}


@router.post("/csv")
def export_csv(data: CsvExportRequest | None = None, db: Session = Depends(get_db)):
    filters = data.filters if data else None
    csv_text = svc.export_items_csv(db, filters)
    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers=_attachment(f"sortr-items-{date.today().isoformat()}.csv"),
    )


@router.post("/csv-import", response_model=ImportPreview | ImportResult)
def import_csv(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    preview: bool = Query(False),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    sink: ActivitySink = Depends(get_activity_sink),
):
    is_csv = (file.filename or "").lower().endswith(".csv") or file.content_type in ("text/csv", "application/vnd.ms-excel")
    if not is_csv:
        raise ValidationFailed.for_field("file", "Only CSV files are allowed")
    rows = svc.parse_csv(file.file.read(svc.MAX_IMPORT_BYTES + 1))
    if preview:
        return svc.preview_import(db, rows)

    items = svc.import_items(db, rows)
    entities = [{"id": item.id, "name": item.name} for item in items]
    background_tasks.add_task(record_bulk, sink, identity.id, ActivityAction.create, EntityType.item, entities)
    return ImportResult(imported=len(items), message=f"Successfully imported {len(items)} items")


@router.get("/json")
def export_json(db: Session = Depends(get_db)):
    backup = svc.export_json(db)
    return JSONResponse(
        content=backup.model_dump(mode="json", by_alias=True),
        headers=_attachment(f"sortr-backup-{date.today().isoformat()}.json"),
    )


@router.get("/template")
def import_template():
    return Response(
        content=svc.import_template_csv(),
        media_type="text/csv; charset=utf-8",
        headers=_attachment("sortr-import-template.csv"),
    )


@router.get("/excel")
def export_excel(db: Session = Depends(get_db)):
    return Response(
        content=svc.export_items_excel(db),
        media_type=XLSX_MEDIA_TYPE,
        headers=_attachment("sortr-inventory.xlsx"),
    )
