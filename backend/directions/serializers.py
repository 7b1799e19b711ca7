from rest_framework import serializers

from common.fields import PointField


class DirectionsRequestSerializer(serializers.Serializer):
    """
    Either explicit stops (`coordinates`, [lng, lat] each) or the ids of the
    caller's deliveries, in visiting order. An empty body routes through all
    of the caller's deliveries.
    """
    coordinates = serializers.ListField(
        child=serializers.ListField(child=serializers.FloatField(), min_length=2, max_length=2),
        required=False,
    )
    delivery_ids = serializers.ListField(child=serializers.IntegerField(), required=False)

    def validate_coordinates(self, value):
        point_field = PointField()
        for position in value:
            point_field.to_internal_value({"type": "Point", "coordinates": position})
        return value

    def validate(self, data):
        if "coordinates" in data and "delivery_ids" in data:
            raise serializers.ValidationError("Send either coordinates or delivery_ids, not both.")
        return data
