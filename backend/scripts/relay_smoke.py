"""End-to-end smoke test for the live driver relay.

Prerequisites:
1. `daphne geodispatch_backend.asgi:application` (or `manage.py runserver`) must be running.
2. The project installed: `pip install -e .` from the repository root.

The script will:
- Log in the demo user (auto-register if missing).
- Create a demo driver through the REST API.
- Open the relay WebSocket with the access token.
- Post a location fix over HTTP and wait for the relayed event.
"""

from __future__ import annotations

import os
import queue
import sys
import threading
from pathlib import Path

import websocket

# Ensure backend/ is on sys.path when run from a checkout
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dashboard_client.api import ApiError, DashboardAPI  # noqa: E402
from dashboard_client.relay import RelaySubscriber, relay_url  # noqa: E402

BASE_URL = os.environ.get("GEODISPATCH_BASE_URL", "http://127.0.0.1:8000")

DEMO_USER = {
    "name": "Relay Demo",
    "email": "relay_demo@example.com",
    "password": "demo1234",
}

FIX = {"lat": 19.4326, "lng": -99.1332}


def _login_or_register(api: DashboardAPI) -> dict:
    try:
        return api.login(DEMO_USER["email"], DEMO_USER["password"])
    except ApiError:
        return api.register(DEMO_USER["name"], DEMO_USER["email"], DEMO_USER["password"])


def main() -> None:
    api = DashboardAPI(BASE_URL)
    user = _login_or_register(api)
    driver = api.create("drivers", {"name": "Relay demo driver", "vehicle": "Bike 1"})
    print(f"[HTTP] User #{user['id']} + Driver #{driver['id']} ready")

    events: queue.Queue = queue.Queue()
    connected = threading.Event()

    def on_event(event):
        if event.get("driver_id") == driver["id"]:
            events.put(event)

    def connect(url):
        ws = websocket.create_connection(url, timeout=30)
        connected.set()
        return ws

    subscriber = RelaySubscriber(
        relay_url(BASE_URL, api.token),
        on_event=on_event,
        on_reconnect=lambda: print("[WS] Reconnected, events during the gap were lost"),
        connect=connect,
    )
    subscriber.start()

    if not connected.wait(timeout=5):
        raise TimeoutError("Relay WebSocket failed to connect within 5 seconds")
    api.update_driver_location(driver["id"], FIX["lat"], FIX["lng"])

    try:
        event = events.get(timeout=10)
        print(f"[RESULT] Relay delivered driver {event['driver_id']} at {event['lat']}, {event['lng']}")
    except queue.Empty:
        raise TimeoutError("No relay event received within 10 seconds")
    finally:
        subscriber.stop()
        api.delete("drivers", driver["id"])

    print("[DONE] Relay end-to-end check completed.")


if __name__ == "__main__":
    main()
