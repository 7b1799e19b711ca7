"""Reconcile entity lists into map markers keyed by id."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .payloads import point_to_latlng

SEARCH_FIELDS = ("name", "description", "address", "vehicle")


def location_field(family: str) -> str:
    return "current_location" if family == "drivers" else "location"


@dataclass
class Marker:
    id: int
    family: str
    lat: float
    lng: float
    label: str = ""

    @property
    def position(self) -> Tuple[float, float]:
        return self.lat, self.lng


@dataclass
class ReconcileResult:
    added: List[int] = field(default_factory=list)
    moved: List[int] = field(default_factory=list)
    removed: List[int] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.moved or self.removed)


def matches(item: Dict, query: str) -> bool:
    query = (query or "").strip().lower()
    if not query:
        return True
    return any(query in str(item.get(name) or "").lower() for name in SEARCH_FIELDS)


class MarkerLayer:
    """Markers for one entity family."""

    def __init__(self, family: str):
        self.family = family
        self.markers: Dict[int, Marker] = {}

    def reconcile(self, items: Iterable[Dict], query: Optional[str] = None) -> ReconcileResult:
        """
        Bring the layer in line with `items`: new ids are added, ids whose
        location changed are moved, ids no longer listed (or filtered out by
        `query`) are removed.
        """
        result = ReconcileResult()
        key = location_field(self.family)
        seen = set()

        for item in items:
            point = item.get(key)
            if not point or not matches(item, query):
                continue
            lat, lng = point_to_latlng(point)
            pk = item["id"]
            seen.add(pk)

            marker = self.markers.get(pk)
            if marker is None:
                self.markers[pk] = Marker(pk, self.family, lat, lng, item.get("name", ""))
                result.added.append(pk)
            else:
                if marker.position != (lat, lng):
                    marker.lat, marker.lng = lat, lng
                    result.moved.append(pk)
                marker.label = item.get("name", marker.label)

        for pk in [pk for pk in self.markers if pk not in seen]:
            del self.markers[pk]
            result.removed.append(pk)
        return result

    def clear(self) -> None:
        self.markers.clear()

    def __len__(self):
        return len(self.markers)

    def __contains__(self, pk) -> bool:
        return pk in self.markers
