"""Zip archive of GPX tracks for every successfully resolved parcel."""

from __future__ import annotations

import io
import zipfile
from datetime import date
from typing import Sequence

from pydantic import BaseModel

from cadastreviz.core.types import RecordStatus
from cadastreviz.export.gpx import gpx_filename, render_gpx
from cadastreviz.parcels.models import ParcelRecord

NO_RECORDS_NOTICE = "No valid parcels with geometry found to export."


class ExportResult(BaseModel):
    """Either a ready archive or a refusal notice, never both."""

    filename: str | None = None
    content: bytes | None = None
    file_count: int = 0
    notice: str | None = None

    @property
    def refused(self) -> bool:
        return self.content is None


def archive_filename(today: date | None = None) -> str:
    today = today or date.today()
    return f"parcels_export_{today.isoformat()}.zip"


def build_gpx_archive(
    records: Sequence[ParcelRecord],
    today: date | None = None,
) -> ExportResult:
    """Package one GPX file per success record into a single zip archive.

    With no eligible record the export is refused with a notice instead of
    producing an empty archive.
    """
    eligible = [
        r for r in records
        if r.status == RecordStatus.SUCCESS and r.geometry is not None
    ]
    if not eligible:
        return ExportResult(notice=NO_RECORDS_NOTICE)

    buffer = io.BytesIO()
    taken: set[str] = set()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for record in eligible:
            archive.writestr(_unique_name(gpx_filename(record.raw_text), taken), render_gpx(record))

    return ExportResult(
        filename=archive_filename(today),
        content=buffer.getvalue(),
        file_count=len(eligible),
    )


def _unique_name(name: str, taken: set[str]) -> str:
    candidate = name
    stem, dot, ext = name.rpartition(".")
    suffix = 1
    while candidate in taken:
        suffix += 1
        candidate = f"{stem}_{suffix}{dot}{ext}"
    taken.add(candidate)
    return candidate
