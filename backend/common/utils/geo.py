"""
Geographic utility functions.

Every stored location is GeoJSON, longitude first:
    {"type": "Point", "coordinates": [lng, lat]}
The helpers here are the only place that swaps between that order and the
(lat, lng) order used for display and distance maths.
"""

from math import radians, cos, sin, asin, sqrt
from typing import List, Optional, Sequence, Tuple


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate distance between two points in meters using Haversine formula.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in meters
    """
    lat1, lon1, lat2, lon2 = map(radians, [float(lat1), float(lon1), float(lat2), float(lon2)])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * asin(sqrt(a))
    r = 6371000  # Earth's radius in meters
    return c * r


def is_valid_lat_lng(lat: float, lng: float) -> bool:
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def make_point(lat: float, lng: float) -> dict:
    """Build a GeoJSON point from a (lat, lng) pair."""
    return {"type": "Point", "coordinates": [float(lng), float(lat)]}


def point_lat_lng(point: Optional[dict]) -> Optional[Tuple[float, float]]:
    """Return (lat, lng) for a GeoJSON point, or None when it has no coordinates."""
    if not point:
        return None
    coordinates = point.get("coordinates")
    if not coordinates or len(coordinates) != 2:
        return None
    lng, lat = coordinates
    return float(lat), float(lng)


def ring_is_closed(ring: Sequence[Sequence[float]]) -> bool:
    return len(ring) > 1 and list(ring[0]) == list(ring[-1])


def close_ring(positions: Sequence[Sequence[float]]) -> List[List[float]]:
    """
    Return a closed linear ring (first position repeated as last).

    An already closed ring is returned unchanged, so closing is idempotent.
    """
    ring = [[float(x), float(y)] for x, y in positions]
    if ring and not ring_is_closed(ring):
        ring.append(list(ring[0]))
    return ring


def point_in_ring(lng: float, lat: float, ring: Sequence[Sequence[float]]) -> bool:
    """Ray casting test for a [lng, lat] position against a closed ring."""
    inside = False
    count = len(ring)
    j = count - 1
    for i in range(count):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]
        if (yi > lat) != (yj > lat):
            cross = (xj - xi) * (lat - yi) / (yj - yi) + xi
            if lng < cross:
                inside = not inside
        j = i
    return inside
