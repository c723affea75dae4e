"""Perimeter edge decomposition for measurement overlays."""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from cadastreviz.core.types import RecordStatus
from cadastreviz.geometry.shapes import outer_rings
from cadastreviz.parcels.models import Edge, LatLon, ParcelRecord

# Mean Earth radius used by the map widget's distance function.
MAP_EARTH_RADIUS_METERS = 6371000.0
MIN_EDGE_LENGTH_METERS = 2.0


def distance_meters(a: LatLon, b: LatLon) -> float:
    """Haversine distance, matching the map widget's own measure."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    sin_dlat = math.sin(math.radians(b.lat - a.lat) / 2)
    sin_dlng = math.sin(math.radians(b.lng - a.lng) / 2)
    h = sin_dlat * sin_dlat + math.cos(lat1) * math.cos(lat2) * sin_dlng * sin_dlng
    return MAP_EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def ring_edges(ring: Sequence[LatLon], record_id: str) -> list[Edge]:
    """One edge per segment longer than the threshold, closing segment included."""
    pairs = list(zip(ring, ring[1:]))
    if len(ring) > 2:
        pairs.append((ring[-1], ring[0]))

    edges: list[Edge] = []
    for p1, p2 in pairs:
        length = distance_meters(p1, p2)
        if length <= MIN_EDGE_LENGTH_METERS:
            continue
        edges.append(
            Edge(
                position=LatLon(lat=(p1.lat + p2.lat) / 2, lng=(p1.lng + p2.lng) / 2),
                length_meters=math.floor(length + 0.5),
                record_id=record_id,
            )
        )
    return edges


def compute_edges(
    records: Sequence[ParcelRecord],
    visible_ids: Iterable[str],
) -> list[Edge]:
    """Edges of every successful record whose id is in ``visible_ids``.

    Computed fresh on each call, in record order.
    """
    wanted = set(visible_ids)
    edges: list[Edge] = []
    for record in records:
        if record.id not in wanted or record.status != RecordStatus.SUCCESS:
            continue
        for ring in outer_rings(record.geometry):
            latlngs = [LatLon(lat=pos[1], lng=pos[0]) for pos in ring]
            edges.extend(ring_edges(latlngs, record.id))
    return edges
