from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from sortr.database import get_db
from sortr.errors import ValidationFailed
from sortr.models.share import ResourceType
from sortr.schemas.share import ResourceRef
from sortr.security import get_current_identity
import sortr.services.qr_service as svc

router = APIRouter(prefix="/api/qr", tags=["qr"], dependencies=[Depends(get_current_identity)])


@router.get("/batch")
def qr_batch(
    ids: str = Query(..., description="Comma-separated IDs"),
    kind: ResourceType = Query(ResourceType.item),
    db: Session = Depends(get_db),
):
    id_list = [int(i.strip()) for i in ids.split(",") if i.strip().isdigit()]
    if not id_list:
        raise ValidationFailed.for_field("ids", "At least one numeric id is required")
    pdf_bytes = svc.generate_batch_pdf(db, kind, id_list)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=sortr-{kind.value}-labels.pdf"},
    )


@router.get("/{kind}/{resource_id}")
def qr_code(kind: ResourceType, resource_id: int, db: Session = Depends(get_db)):
    png_bytes = svc.generate_qr(db, ResourceRef(kind=kind, id=resource_id))
    return Response(content=png_bytes, media_type="image/png")
