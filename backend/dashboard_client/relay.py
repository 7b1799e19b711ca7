"""
Live relay subscription over websocket-client.

Events published while the subscriber is disconnected are lost; after every
reconnect `on_reconnect` fires so the owner can reload from the REST layer.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Callable, Dict, Optional
from urllib.parse import urlencode

import websocket

logger = logging.getLogger(__name__)

LOCATION_EVENT = "driver_location_updated"


def relay_url(base_url: str, token: str) -> str:
    """ws(s)://host/ws/relay/?token=... from the REST base URL."""
    ws_base = base_url.rstrip("/").replace("http", "ws", 1)
    return f"{ws_base}/ws/relay/?{urlencode({'token': token})}"


def backoff_delay(attempt: int, base: float = 0.5, maximum: float = 10.0) -> float:
    """Exponential delay for the given failed attempt, capped at `maximum`."""
    return min(maximum, base * (2 ** max(attempt, 0)))


class RelaySubscriber:
    def __init__(
        self,
        url: str,
        on_event: Callable[[Dict], None],
        on_reconnect: Optional[Callable[[], None]] = None,
        connect: Optional[Callable[[str], object]] = None,
        backoff_base: float = 0.5,
        backoff_max: float = 10.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.url = url
        self.on_event = on_event
        self.on_reconnect = on_reconnect
        self._connect = connect or (lambda target: websocket.create_connection(target, timeout=30))
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self._sleep = sleep
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.ws = None
        self.connections = 0

    # ---------------------- Lifecycle ----------------------

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run, daemon=True)
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        self._stop.set()
        self._close_socket()

    def _close_socket(self) -> None:
        ws, self.ws = self.ws, None
        if ws is None:
            return
        try:
            ws.close()
        except (websocket.WebSocketException, OSError) as e:
            logger.debug("Error closing relay socket: %s", e)

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def run(self) -> None:
        """Connect, dispatch, and reconnect with bounded backoff until stopped."""
        failures = 0
        while not self.stopped:
            try:
                self.ws = self._connect(self.url)
            except (websocket.WebSocketException, OSError) as e:
                delay = backoff_delay(failures, self.backoff_base, self.backoff_max)
                failures += 1
                logger.warning("Relay connect failed (%s), retrying in %.1fs", e, delay)
                self._sleep(delay)
                continue

            failures = 0
            self.connections += 1
            if self.connections > 1:
                logger.info("Relay reconnected; events during the gap were lost")
                if self.on_reconnect is not None:
                    try:
                        self.on_reconnect()
                    except Exception:
                        logger.exception("Relay reconnect handler failed")

            self._listen()
            self._close_socket()

    def _listen(self) -> None:
        while not self.stopped:
            try:
                message = self.ws.recv()
            except (websocket.WebSocketException, OSError) as e:
                logger.info("Relay connection dropped: %s", e)
                return
            if not message:
                return
            self.dispatch(message)

    # ---------------------- Messages ----------------------

    def dispatch(self, message) -> bool:
        """Hand a raw frame to on_event if it is a location event."""
        try:
            payload = json.loads(message)
        except (TypeError, ValueError):
            logger.debug("Ignoring non-JSON relay frame: %r", message)
            return False
        if not isinstance(payload, dict) or payload.get("type") != LOCATION_EVENT:
            return False
        try:
            self.on_event(payload)
        except Exception:
            # a failing handler must not take the subscriber thread down
            logger.exception("Relay event handler failed for %r", payload)
        return True

    def publish(self, driver_id, lat: float, lng: float) -> bool:
        """Send an update_location frame; dropped silently if not connected."""
        if self.ws is None:
            return False
        frame = {"type": "update_location", "driver_id": driver_id, "lat": lat, "lng": lng}
        try:
            self.ws.send(json.dumps(frame))
            return True
        except (websocket.WebSocketException, OSError) as e:
            logger.warning("Dropped relay publish for driver %s: %s", driver_id, e)
            return False
