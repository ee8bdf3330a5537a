from datetime import date
from typing import Any
from pydantic import Field
from sortr.schemas.base import CamelModel


class ExportFilters(CamelModel):
    category: str | None = None
    box_id: int | None = Field(default=None, ge=1)
    location_id: int | None = Field(default=None, ge=1)
    tag: str | None = None
    is_favorite: bool | None = None


class CsvExportRequest(CamelModel):
    filters: ExportFilters = ExportFilters()


class ImportRowError(CamelModel):
    row: int
    field: str
    message: str


class ImportRow(CamelModel):
    name: str
    category: str | None = None
    description: str | None = None
    box_id: int | None = None
    location_id: int | None = None
    tags: list[str] | None = None
    is_favorite: bool = False
    expiration_date: date | None = None


class ImportPreview(CamelModel):
    preview: bool = True
    total_rows: int
    valid_rows: int
    error_count: int
    errors: list[ImportRowError]
    sample_rows: list[ImportRow]


class ImportResult(CamelModel):
    success: bool = True
    imported: int
    message: str


class JsonBackup(CamelModel):
    export_date: str
    version: str = "1.0"
    data: dict[str, list[dict[str, Any]]]
