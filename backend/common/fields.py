"""REST framework fields for GeoJSON geometry payloads."""

from numbers import Number

from rest_framework import serializers

from common.utils.geo import close_ring, is_valid_lat_lng


def _position(value, field):
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 2
        or not all(isinstance(v, Number) and not isinstance(v, bool) for v in value)
    ):
        field.fail("invalid_position")
    lng, lat = float(value[0]), float(value[1])
    if not is_valid_lat_lng(lat, lng):
        field.fail("out_of_bounds")
    return [lng, lat]


class PointField(serializers.Field):
    """
    A single coordinate pair stored as {"type": "Point", "coordinates": [lng, lat]}.
    """
    default_error_messages = {
        "invalid": 'Expected a GeoJSON object like {"type": "Point", "coordinates": [lng, lat]}.',
        "invalid_position": "Coordinates must be exactly two numbers: [longitude, latitude].",
        "out_of_bounds": "Longitude must be within [-180, 180] and latitude within [-90, 90].",
    }

    def to_internal_value(self, data):
        if not isinstance(data, dict) or data.get("type") != "Point" or "coordinates" not in data:
            self.fail("invalid")
        return {"type": "Point", "coordinates": _position(data["coordinates"], self)}

    def to_representation(self, value):
        return value


class PolygonField(serializers.Field):
    """
    A single-ring GeoJSON polygon. Open rings are closed on the way in.
    """
    default_error_messages = {
        "invalid": 'Expected a GeoJSON object like {"type": "Polygon", "coordinates": [[[lng, lat], ...]]}.',
        "invalid_position": "Each vertex must be exactly two numbers: [longitude, latitude].",
        "out_of_bounds": "Longitude must be within [-180, 180] and latitude within [-90, 90].",
        "too_few_vertices": "A zone needs at least 3 distinct vertices.",
    }

    def to_internal_value(self, data):
        if not isinstance(data, dict) or data.get("type") != "Polygon":
            self.fail("invalid")
        return {"type": "Polygon", "coordinates": [self.ring_from_coordinates(data.get("coordinates"))]}

    def ring_from_coordinates(self, coordinates):
        """Validate `[[ring]]` polygon coordinates and return the closed ring."""
        if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 1:
            self.fail("invalid")
        ring = coordinates[0]
        if not isinstance(ring, (list, tuple)):
            self.fail("invalid")
        positions = [_position(vertex, self) for vertex in ring]
        distinct = {tuple(p) for p in positions}
        if len(distinct) < 3:
            self.fail("too_few_vertices")
        return close_ring(positions)

    def to_representation(self, value):
        return value
