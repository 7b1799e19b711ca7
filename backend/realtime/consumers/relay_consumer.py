"""Live relay consumer: driver location events fanned out to every dashboard session."""

import logging
from typing import Dict, Any

from .base import BaseConsumer
from realtime.broadcast import publish_driver_location_async
from realtime.registry import get_session_registry

logger = logging.getLogger(__name__)

LOCATION_KEYS = ("driver_id", "lat", "lng")

# Key used by the browser dashboard for the driver id
DRIVER_ID_ALIAS = "driverId"


class LiveRelayConsumer(BaseConsumer):
    """
    WebSocket consumer for dashboard sessions.

    Inbound frames:
        - update_location: relayed unmodified to all sessions, sender included
        - ping: answered with pong

    The relay keeps no state beyond the session registry. It does not check
    that the driver exists or that the coordinates are in range, and it
    does not persist anything.
    """

    def get_registry(self):
        return get_session_registry()

    async def on_connect(self):
        self.registry = self.get_registry()
        await self.registry.add(self.channel_name, self.user_id)
        await self.send_frame(
            "connection_established",
            user_id=self.user_id,
            session_id=self.channel_name,
        )

    async def on_disconnect(self, close_code):
        registry = getattr(self, "registry", None)
        if registry is not None:
            await registry.remove(self.channel_name)

    # ---------------------- Inbound frames ----------------------

    async def handle_update_location(self, data: Dict[str, Any]):
        payload = {key: value for key, value in data.items() if key != "type"}
        if "driver_id" not in payload and DRIVER_ID_ALIAS in payload:
            payload["driver_id"] = payload.pop(DRIVER_ID_ALIAS)

        missing = [key for key in LOCATION_KEYS if key not in payload]
        if missing:
            await self.send_error(f"update_location requires {', '.join(missing)}")
            return

        driver_id = payload.pop("driver_id")
        lat = payload.pop("lat")
        lng = payload.pop("lng")
        logger.debug(
            "Session %s relaying driver %s at lat=%s lng=%s",
            self.channel_name, driver_id, lat, lng,
        )
        await publish_driver_location_async(
            driver_id, lat, lng, registry=self.registry, extra=payload,
        )

    async def handle_ping(self, data: Dict[str, Any]):
        await self.send_frame("pong")

    # ---------------------- Group events ----------------------

    async def driver_location_updated(self, event):
        """Forward a relayed location event to the client as published."""
        await self.send_json(event)
