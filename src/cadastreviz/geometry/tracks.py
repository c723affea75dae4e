"""Flattening parcel geometry into GPS track segments."""

from __future__ import annotations

from typing import Any, NamedTuple

from cadastreviz.geometry.shapes import iter_polygons


class TrackPoint(NamedTuple):
    lat: float
    lon: float
    ele: float = 0.0


def track_segments(geojson: dict[str, Any] | None) -> list[list[TrackPoint]]:
    """One segment per ring: outer ring, then its holes, then the next polygon.

    GeoJSON positions are [lng, lat]; points come out as (lat, lon, 0).
    """
    segments: list[list[TrackPoint]] = []
    for polygon in iter_polygons(geojson):
        for ring in polygon:
            if not ring:
                continue
            segments.append([TrackPoint(lat=pos[1], lon=pos[0]) for pos in ring])
    return segments
