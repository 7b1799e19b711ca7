from clients.models import Client
from common.utils.geo import point_in_ring, point_lat_lng
from deliveries.models import Delivery
from drivers.models import Driver
from places.models import Place

# (response key, model, GeoJSON point attribute)
_FAMILIES = [
    ("places", Place, "location"),
    ("clients", Client, "location"),
    ("deliveries", Delivery, "location"),
    ("drivers", Driver, "current_location"),
]


def entities_in_zone(zone):
    """Ids of the zone owner's entities whose point falls inside the ring, per family."""
    ring = zone.ring
    contents = {}
    for key, model, attr in _FAMILIES:
        ids = []
        for obj in model.objects.filter(owner_id=zone.owner_id).order_by("id"):
            position = point_lat_lng(getattr(obj, attr))
            if position is None:
                continue
            lat, lng = position
            if point_in_ring(lng, lat, ring):
                ids.append(obj.pk)
        contents[key] = ids
    return contents
