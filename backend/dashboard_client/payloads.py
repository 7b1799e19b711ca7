"""Geographic payload builders. Stored order is always [longitude, latitude]."""

from typing import Dict, List, Sequence, Tuple

LatLng = Tuple[float, float]


def point_payload(lat: float, lng: float) -> Dict:
    return {"type": "Point", "coordinates": [lng, lat]}


def point_to_latlng(point: Dict) -> LatLng:
    lng, lat = point["coordinates"][:2]
    return lat, lng


def polygon_payload(vertices: Sequence[LatLng]) -> Dict:
    """
    Build a GeoJSON Polygon from drawn (lat, lng) vertices.

    The ring is closed by repeating the first vertex, so N drawn vertices
    become N+1 coordinates. A ring that is already closed is left alone.
    """
    if len(vertices) < 3:
        raise ValueError("A zone needs at least 3 vertices")

    ring: List[List[float]] = [[lng, lat] for lat, lng in vertices]
    if ring[0] != ring[-1]:
        ring.append(list(ring[0]))
    return {"type": "Polygon", "coordinates": [ring]}


def ring_to_latlngs(polygon: Dict) -> List[LatLng]:
    """Outer ring of a stored polygon as (lat, lng) pairs, order preserved."""
    return [(lat, lng) for lng, lat in polygon["coordinates"][0]]
