"""
Client for the OSRM route service.

OSRM takes and returns positions longitude first, the same order the
entities are stored in, so coordinates pass through without swapping.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Sequence

import requests
from django.conf import settings

from common.exceptions import RoutingUnavailable

logger = logging.getLogger(__name__)


@dataclass
class Route:
    """Best route returned by the routing service."""
    geometry: Dict[str, Any]
    distance: float  # meters
    duration: float  # seconds

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class OSRMClient:
    """
    One synchronous call per route request. No retry and no fallback: any
    failure surfaces as RoutingUnavailable.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        profile: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.OSRM_BASE_URL).rstrip("/")
        self.profile = profile or settings.OSRM_PROFILE
        self.timeout = timeout if timeout is not None else settings.OSRM_TIMEOUT
        self.session = session or requests.Session()

    def route(self, coordinates: Sequence[Sequence[float]]) -> Route:
        """
        Route through the stops in the given order.

        Args:
            coordinates: ordered [lng, lat] pairs, at least two

        Returns:
            Route with GeoJSON LineString geometry, distance and duration
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required for a route.")

        # OSRM format: /route/v1/driving/lng1,lat1;lng2,lat2
        coords = ";".join(f"{lng},{lat}" for lng, lat in coordinates)
        url = f"{self.base_url}/route/v1/{self.profile}/{coords}"
        params = {
            "overview": "full",
            "geometries": "geojson",
        }

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("[OSRM] Request failed: %s", e)
            raise RoutingUnavailable(f"Could not reach the routing service: {e}")

        if data.get("code") != "Ok" or not data.get("routes"):
            message = data.get("message") or data.get("code") or "no route"
            logger.warning("[OSRM] Error: %s", message)
            raise RoutingUnavailable(f"Routing service error: {message}")

        best = data["routes"][0]
        route = Route(
            geometry=best.get("geometry", {}),
            distance=float(best.get("distance", 0.0)),
            duration=float(best.get("duration", 0.0)),
        )
        logger.info(
            "[OSRM] Route over %s stops: %.1fkm / %.0fmin",
            len(coordinates), route.distance / 1000, route.duration / 60,
        )
        return route


def get_osrm_client() -> OSRMClient:
    return OSRMClient()
