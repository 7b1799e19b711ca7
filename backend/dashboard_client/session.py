"""Dashboard session: tab state, loaded entities and the user workflows."""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Sequence

from .api import ApiError, FAMILIES, DashboardAPI
from .interaction import InteractionController, InteractionError
from .markers import MarkerLayer, location_field
from .payloads import LatLng

logger = logging.getLogger(__name__)

TABS = FAMILIES + ("zones",)

KIND_FAMILY = {
    "place": "places",
    "client": "clients",
    "delivery": "deliveries",
    "driver": "drivers",
}


class NotEnoughStopsError(Exception):
    """Route optimisation needs at least two deliveries."""


class DashboardSession:
    def __init__(self, api: DashboardAPI, controller: Optional[InteractionController] = None):
        self.api = api
        self.controller = controller or InteractionController()
        self.current_tab = "places"
        self.search = ""
        self.items: Dict[str, List[Dict]] = {tab: [] for tab in TABS}
        self.layers = {family: MarkerLayer(family) for family in FAMILIES}
        self.route: Optional[Dict] = None
        self._lock = threading.RLock()

    # ---------------------- Loading ----------------------

    def load(self, tab: str) -> List[Dict]:
        items = self.api.list(tab)
        with self._lock:
            self.items[tab] = items
            if tab in self.layers:
                self.layers[tab].reconcile(items, self.search)
        return items

    def switch_tab(self, tab: str) -> List[Dict]:
        if tab not in TABS:
            raise ValueError(f"Unknown tab: {tab}")
        self.current_tab = tab
        return self.load(tab)

    def set_search(self, query: str) -> None:
        self.search = query or ""
        if self.current_tab in self.layers:
            with self._lock:
                self.layers[self.current_tab].reconcile(self.items[self.current_tab], self.search)

    def visible_items(self) -> List[Dict]:
        tab = self.current_tab
        if tab not in self.layers:
            return list(self.items[tab])
        layer = self.layers[tab]
        return [item for item in self.items[tab] if item["id"] in layer]

    # ---------------------- Relay ----------------------

    def handle_relay_event(self, event: Dict) -> bool:
        """
        Location events are advisory: they carry no status or capacity, so the
        drivers tab reloads from the API instead of patching local state.
        """
        if self.current_tab != "drivers":
            return False
        logger.debug("Reloading drivers after relay event for driver %s", event.get("driver_id"))
        self.load("drivers")
        return True

    def handle_reconnect(self) -> None:
        """Events missed during a relay gap are gone; resync the open tab."""
        self.load(self.current_tab)

    # ---------------------- Point placement ----------------------

    def _load_clients(self):
        return self.load("clients")

    def arm_point(self, kind: str) -> int:
        return self.controller.arm_point(kind, clients_loader=self._load_clients)

    def click(self, lat: float, lng: float):
        return self.controller.click(lat, lng)

    def submit_form(self, fields: Dict) -> Optional[Dict]:
        """
        Persist the captured point with the form's fields. The controller
        returns to idle whether or not the create succeeds; API errors are
        re-raised for the caller to surface.
        """
        capture = self.controller.capture
        if capture is None or capture.kind not in KIND_FAMILY:
            raise InteractionError("No point captured")

        family = KIND_FAMILY[capture.kind]
        body = dict(fields)
        body[location_field(family)] = capture.payload
        generation = capture.generation
        try:
            created = self.api.create(family, body)
        finally:
            current = self.controller.is_current(generation)
            if current:
                self.controller.finish()

        if not current:
            # the mode changed while the request was in flight
            logger.debug("Discarding stale create response for %s", family)
            return created
        if family == self.current_tab:
            self.load(family)
        return created

    def cancel(self) -> None:
        self.controller.cancel()

    # ---------------------- Zones ----------------------

    def start_zone(self) -> int:
        return self.controller.arm_polygon()

    def complete_zone(self, vertices: Sequence[LatLng]):
        return self.controller.complete_polygon(vertices)

    def name_zone(self, name: Optional[str], description: str = "") -> Optional[Dict]:
        """
        Answer the naming prompt. An empty name cancels; a failed save discards
        the drawn shape and the error is re-raised.
        """
        capture = self.controller.capture
        if capture is None or capture.kind != "zone":
            raise InteractionError("No zone captured")

        if not name:
            self.controller.cancel()
            return None

        generation = capture.generation
        try:
            zone = self.api.create_zone({"name": name, "description": description, "area": capture.payload})
        except ApiError:
            logger.info("Zone save failed; discarding the drawn shape")
            raise
        finally:
            current = self.controller.is_current(generation)
            if current:
                self.controller.finish()

        if not current:
            logger.debug("Discarding stale zone response %s", zone.get("id"))
            return zone
        with self._lock:
            self.items["zones"].append(zone)
        return zone

    # ---------------------- Routing ----------------------

    def optimise_route(self) -> Dict:
        deliveries = self.items["deliveries"] or self.load("deliveries")
        if len(deliveries) < 2:
            raise NotEnoughStopsError("At least two deliveries are needed to compute a route")
        self.route = self.api.directions(delivery_ids=[d["id"] for d in deliveries])
        return self.route
