import io
import qrcode
from qrcode.image.pil import PilImage
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib import colors
from reportlab.pdfgen import canvas
from reportlab.lib.utils import ImageReader
from sqlalchemy.orm import Session
from sortr.models.share import ResourceType
from sortr.schemas.share import ResourceRef
from sortr.services.share_service import RESOURCE_MODELS, resolve_resource

DEEP_LINK_SCHEME = "sortr"

# Label header colour per kind
_KIND_COLORS = {
    ResourceType.item: "#198754",
    ResourceType.box: "#fd7e14",
    ResourceType.location: "#0d6efd",
}


def deep_link(ref: ResourceRef) -> str:
    return f"{DEEP_LINK_SCHEME}://{ref.kind.value}/{ref.id}"


def _make_qr_bytes(data: str) -> bytes:
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)
    img: PilImage = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def generate_qr(db: Session, ref: ResourceRef) -> bytes:
    """PNG QR code for an existing item, box or location."""
    resolve_resource(db, ref)
    return _make_qr_bytes(deep_link(ref))


def generate_batch_pdf(db: Session, kind: ResourceType, ids: list[int]) -> bytes:
    """A4 sheet of labels: coloured header, square QR, name and id. Unknown ids are skipped."""
    model = RESOURCE_MODELS[kind]
    resources = [r for r in (db.get(model, i) for i in ids) if r is not None]

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    page_width, page_height = A4

    label_w = 60 * mm
    label_h = 56 * mm
    qr_size = 35 * mm
    header_h = 10 * mm
    margin = 8 * mm
    accent = colors.HexColor(_KIND_COLORS[kind])

    cols = int((page_width - margin) / (label_w + margin))
    rows_per_page = int((page_height - margin) / (label_h + margin))

    for idx, resource in enumerate(resources):
        col = idx % cols
        row = (idx // cols) % rows_per_page
        if idx > 0 and idx % (cols * rows_per_page) == 0:
            c.showPage()

        x = margin + col * (label_w + margin)
        y = page_height - margin - (row + 1) * (label_h + margin)

        c.setFillColor(accent)
        c.rect(x, y + label_h - header_h, label_w, header_h, fill=True, stroke=False)
        c.setFillColor(colors.white)
        c.setFont("Helvetica-Bold", 8)
        c.drawCentredString(x + label_w / 2, y + label_h - 6.5 * mm, kind.value.upper())

        c.setFillColor(colors.black)
        qr_png = _make_qr_bytes(deep_link(ResourceRef(kind=kind, id=resource.id)))
        c.drawImage(
            ImageReader(io.BytesIO(qr_png)),
            x + (label_w - qr_size) / 2, y + 10 * mm,
            width=qr_size, height=qr_size,
        )

        c.setFont("Helvetica-Bold", 10)
        c.drawCentredString(x + label_w / 2, y + 6 * mm, resource.name[:32])
        c.setFont("Helvetica", 7)
        c.drawCentredString(x + label_w / 2, y + 2.5 * mm, f"#{resource.id}")

        c.setStrokeColor(accent)
        c.setLineWidth(2)
        c.rect(x, y, label_w, label_h)
        c.setLineWidth(1)

    c.save()
    return buf.getvalue()
