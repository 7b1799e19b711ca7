"""
Driver location publishing for the live relay.

Publishing is fire-and-forget: there is no acknowledgement, no retry and no
error channel back to the publisher. A failed publish is logged and the event
is lost.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from asgiref.sync import async_to_sync

from .registry import get_session_registry

logger = logging.getLogger(__name__)

LOCATION_EVENT = "driver_location_updated"


def build_location_event(driver_id: Any, lat: Any, lng: Any, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Relay payload. Values are carried exactly as given; any `extra` keys
    sent by the publisher ride along untouched.
    """
    event: Dict[str, Any] = dict(extra or {})
    event.update(type=LOCATION_EVENT, driver_id=driver_id, lat=lat, lng=lng)
    return event


async def publish_driver_location_async(driver_id: Any, lat: Any, lng: Any, registry=None, extra=None) -> bool:
    """Fan a location event out to every connected session."""
    registry = registry or get_session_registry()
    try:
        await registry.publish(build_location_event(driver_id, lat, lng, extra))
        return True
    except Exception as e:
        logger.warning("Dropped location event for driver %s: %s", driver_id, e)
        return False


def publish_driver_location(driver_id: Any, lat: Any, lng: Any, registry=None, extra=None) -> bool:
    """Sync version of publish_driver_location_async, for REST views and tasks."""
    registry = registry or get_session_registry()
    try:
        async_to_sync(registry.publish)(build_location_event(driver_id, lat, lng, extra))
        return True
    except Exception as e:
        logger.warning("Dropped location event for driver %s: %s", driver_id, e)
        return False
