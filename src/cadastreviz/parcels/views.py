"""Read models handed to the list view and the map widget."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from pydantic import BaseModel, Field

from cadastreviz.core.types import RecordStatus
from cadastreviz.geometry.area import format_area, geometry_area
from cadastreviz.geometry.edges import compute_edges
from cadastreviz.parcels.models import Edge, ParcelRecord


class RecordView(BaseModel):
    """A record plus its derived area, as shown in the result list."""

    record: ParcelRecord
    area_m2: float = 0.0
    area_label: str = ""


class MapPayload(BaseModel):
    """Everything the map widget needs to draw: polygons, selection, edge labels."""

    features: dict[str, Any] = Field(
        default_factory=lambda: {"type": "FeatureCollection", "features": []}
    )
    selected_id: str | None = None
    edges: list[Edge] = Field(default_factory=list)


def record_view(record: ParcelRecord) -> RecordView:
    if record.status != RecordStatus.SUCCESS:
        return RecordView(record=record)
    area = geometry_area(record.geometry)
    return RecordView(record=record, area_m2=area, area_label=format_area(area))


def build_map_payload(
    records: Sequence[ParcelRecord],
    selected_id: str | None = None,
    measure_ids: Iterable[str] = (),
) -> MapPayload:
    """Named polygons of every successful record.

    Only a successful record can be selected; any other id is dropped.
    """
    success = [r for r in records if r.status == RecordStatus.SUCCESS]
    success_ids = {r.id for r in success}
    selected = selected_id if selected_id in success_ids else None

    features: list[dict[str, Any]] = []
    for record in success:
        view = record_view(record)
        for feature in (record.geometry or {}).get("features", []):
            features.append({
                "type": "Feature",
                "id": record.id,
                "geometry": feature.get("geometry"),
                "properties": {
                    "record_id": record.id,
                    "label": record.raw_text,
                    "area_label": view.area_label,
                    "selected": record.id == selected,
                },
            })

    return MapPayload(
        features={"type": "FeatureCollection", "features": features},
        selected_id=selected,
        edges=compute_edges(records, measure_ids),
    )
