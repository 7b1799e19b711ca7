import logging

from django.db import transaction
from django.utils import timezone

from common.utils.geo import make_point, point_lat_lng
from drivers.models import Driver
from realtime.broadcast import publish_driver_location

logger = logging.getLogger(__name__)


def announce_location(driver: Driver):
    """
    Publish the driver's persisted position on the relay once the current
    transaction commits, so listeners that reload see the new row.
    """
    position = point_lat_lng(driver.current_location)
    if position is None:
        return
    lat, lng = position
    transaction.on_commit(lambda: publish_driver_location(driver.pk, lat, lng))


def update_driver_location(driver: Driver, lat: float, lng: float) -> Driver:
    """
    Persist a new position for the driver and announce it on the relay.
    Used by the HTTP location endpoint.

    The row is re-read under a lock so the version bump serialises with
    concurrent conditional PUTs; the returned instance is the fresh row.
    """
    with transaction.atomic():
        locked = Driver.objects.select_for_update().get(pk=driver.pk)
        locked.current_location = make_point(lat, lng)
        locked.last_location_update = timezone.now()
        locked.version = locked.version + 1
        locked.save(update_fields=["current_location", "last_location_update", "version", "updated_at"])
        logger.info("Driver %s moved to lat=%s lng=%s", locked.pk, lat, lng)

        announce_location(locked)
    return locked
