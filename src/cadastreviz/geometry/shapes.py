"""Walking GeoJSON trees down to polygons and rings."""

from __future__ import annotations

from typing import Any, Iterator

# A ring is a list of GeoJSON positions: [longitude, latitude, (elevation)].
Ring = list[list[float]]
Polygon = list[Ring]


def iter_polygons(geojson: dict[str, Any] | None) -> Iterator[Polygon]:
    """Yield every polygon (outer ring first, then holes) in document order.

    Handles FeatureCollection, Feature, GeometryCollection, Polygon and
    MultiPolygon; other geometry types contribute nothing.
    """
    if not geojson:
        return
    kind = geojson.get("type")
    if kind == "FeatureCollection":
        for feature in geojson.get("features") or []:
            yield from iter_polygons(feature)
    elif kind == "Feature":
        yield from iter_polygons(geojson.get("geometry"))
    elif kind == "GeometryCollection":
        for geometry in geojson.get("geometries") or []:
            yield from iter_polygons(geometry)
    elif kind == "Polygon":
        yield geojson.get("coordinates") or []
    elif kind == "MultiPolygon":
        yield from geojson.get("coordinates") or []


def outer_rings(geojson: dict[str, Any] | None) -> Iterator[Ring]:
    for polygon in iter_polygons(geojson):
        if polygon:
            yield polygon[0]


def as_feature_collection(geojson: Any) -> dict[str, Any] | None:
    """Normalise a geometry response to a FeatureCollection.

    A single Feature or a bare geometry is wrapped into a one-feature
    collection. Anything unrecognised yields ``None``.
    """
    if not isinstance(geojson, dict):
        return None
    kind = geojson.get("type")
    if kind == "FeatureCollection":
        if not isinstance(geojson.get("features"), list):
            return None
        return geojson
    if kind == "Feature":
        return {"type": "FeatureCollection", "features": [geojson]}
    if kind in ("Polygon", "MultiPolygon", "GeometryCollection"):
        return {
            "type": "FeatureCollection",
            "features": [{"type": "Feature", "geometry": geojson, "properties": {}}],
        }
    return None
