"""Spherical polygon area and its display form.

Area of a ring on a sphere of radius R::

    |R^2 / 2 * sum((lng2 - lng1) * (2 + sin(lat1) + sin(lat2)))|

summed over consecutive vertices (wrapping last -> first), angles in
radians. R is the WGS84 equatorial radius, so this is an approximation, not
a geodesic area. Holes are ignored: only outer rings count.
"""

from __future__ import annotations

import math
from typing import Any, Sequence

from cadastreviz.geometry.shapes import outer_rings

EARTH_RADIUS_METERS = 6378137.0
HECTARE_THRESHOLD_M2 = 10_000.0


def ring_area(ring: Sequence[Sequence[float]]) -> float:
    """Absolute area in square meters of a ring of [lng, lat] positions."""
    n = len(ring)
    if n <= 2:
        return 0.0
    total = 0.0
    for i in range(n):
        lng1, lat1 = ring[i][0], ring[i][1]
        lng2, lat2 = ring[(i + 1) % n][0], ring[(i + 1) % n][1]
        total += math.radians(lng2 - lng1) * (
            2 + math.sin(math.radians(lat1)) + math.sin(math.radians(lat2))
        )
    return abs(total * EARTH_RADIUS_METERS * EARTH_RADIUS_METERS / 2.0)


def geometry_area(geojson: dict[str, Any] | None) -> float:
    """Sum of the outer-ring areas of every polygon in ``geojson``."""
    return sum(ring_area(ring) for ring in outer_rings(geojson))


def format_area(area_m2: float) -> str:
    """Render an area: whole square meters up to one hectare (1,234 m²),
    hectares with four decimals above it (1.2345 ha). Zero renders empty.
    """
    if area_m2 == 0:
        return ""
    if area_m2 > HECTARE_THRESHOLD_M2:
        return f"{area_m2 / HECTARE_THRESHOLD_M2:.4f} ha"
    return f"{math.floor(area_m2 + 0.5):,} m²"
