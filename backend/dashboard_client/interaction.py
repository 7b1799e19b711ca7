"""
Map interaction state machine.

States:
    idle
    awaiting-point[kind]   armed to create a place, client, delivery or driver
    awaiting-polygon       freehand zone drawing

Only one mode is armed at a time. A click or completed ring produces a
Capture (the pre-filled form or naming prompt); submitting or cancelling it
returns to idle. Every transition bumps the generation counter so responses
to requests issued under an older mode can be recognised and ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

from .payloads import LatLng, point_payload, polygon_payload

logger = logging.getLogger(__name__)

IDLE = "idle"
AWAITING_POINT = "awaiting-point"
AWAITING_POLYGON = "awaiting-polygon"

POINT_KINDS = ("place", "client", "delivery", "driver")

BANNERS = {
    "place": "Click on the map to add a place",
    "client": "Click on the map to add a client",
    "delivery": "Click on the map to add a delivery",
    "driver": "Click on the map to add a driver",
    "polygon": "Draw a zone: click to add vertices, close the ring on the first vertex",
}

ARMED_CURSOR = "crosshair"
DEFAULT_CURSOR = ""


class InteractionError(Exception):
    """Transition not allowed from the current state."""


class NoClientsError(InteractionError):
    """A delivery cannot be placed before at least one client exists."""


@dataclass
class Capture:
    """Geometry captured by an armed mode, waiting for its form or name."""
    kind: str
    payload: Dict
    generation: int


class InteractionController:
    def __init__(self, on_reset: Optional[Callable[[str], None]] = None):
        self.state = IDLE
        self.kind: Optional[str] = None
        self.capture: Optional[Capture] = None
        self.cursor = DEFAULT_CURSOR
        self.generation = 0
        self._on_reset = on_reset

    @property
    def banner(self) -> Optional[str]:
        if self.state == AWAITING_POINT:
            return BANNERS[self.kind]
        if self.state == AWAITING_POLYGON:
            return BANNERS["polygon"]
        return None

    @property
    def is_armed(self) -> bool:
        return self.state != IDLE

    def is_current(self, generation: int) -> bool:
        """True if a response issued under `generation` still applies."""
        return generation == self.generation

    def _reset(self):
        """Clear the previous mode's affordances before entering a new state."""
        previous = self.kind if self.state == AWAITING_POINT else self.state
        self.cursor = DEFAULT_CURSOR
        self.capture = None
        if self.state != IDLE and self._on_reset is not None:
            self._on_reset(previous)
        self.generation += 1

    # ---------------------- Transitions ----------------------

    def arm_point(self, kind: str, clients_loader: Optional[Callable[[], Sequence]] = None) -> int:
        """
        Arm point placement for `kind`.

        Delivery placement needs a populated client list: `clients_loader` is
        called first and arming is aborted with NoClientsError when it comes
        back empty. The current mode is left untouched in that case.
        """
        if kind not in POINT_KINDS:
            raise InteractionError(f"Unknown entity kind: {kind}")

        if kind == "delivery":
            clients = clients_loader() if clients_loader is not None else []
            if not clients:
                raise NoClientsError("Create a client before adding deliveries")

        self._reset()
        self.state = AWAITING_POINT
        self.kind = kind
        self.cursor = ARMED_CURSOR
        logger.debug("Armed point placement for %s (generation %s)", kind, self.generation)
        return self.generation

    def arm_polygon(self) -> int:
        self._reset()
        self.state = AWAITING_POLYGON
        self.kind = None
        self.cursor = ARMED_CURSOR
        return self.generation

    def cancel(self) -> None:
        """Explicit cancel: drop the armed mode and any pending capture."""
        if self.state == IDLE and self.capture is None:
            return
        self._reset()
        self.state = IDLE
        self.kind = None

    def click(self, lat: float, lng: float) -> Optional[Capture]:
        """
        A single map click. In awaiting-point it captures the location and
        opens the creation form; in any other state it is ignored.
        """
        if self.state != AWAITING_POINT or self.capture is not None:
            return None
        self.capture = Capture(kind=self.kind, payload=point_payload(lat, lng), generation=self.generation)
        self.cursor = DEFAULT_CURSOR
        return self.capture

    def complete_polygon(self, vertices: Sequence[LatLng]) -> Capture:
        """Ring completed by the draw tool: capture it (closed) and prompt for a name."""
        if self.state != AWAITING_POLYGON:
            raise InteractionError("No polygon drawing in progress")
        self.capture = Capture(kind="zone", payload=polygon_payload(vertices), generation=self.generation)
        return self.capture

    def finish(self) -> None:
        """Form submitted or prompt answered, whatever the outcome: back to idle."""
        if self.state == IDLE:
            return
        self._reset()
        self.state = IDLE
        self.kind = None
