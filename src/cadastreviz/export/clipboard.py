"""Plain-text parcel list for copying to the clipboard."""

from __future__ import annotations

from typing import Sequence

from cadastreviz.parcels.models import ParcelQuery


def clipboard_line(parcel: ParcelQuery) -> str:
    return f"{parcel.commune_name} Section {parcel.section} N° {parcel.numero}"


def clipboard_text(parcels: Sequence[ParcelQuery]) -> str:
    return "\n".join(clipboard_line(p) for p in parcels)
