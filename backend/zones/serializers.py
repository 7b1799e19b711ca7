from rest_framework import serializers

from common.fields import PolygonField
from common.serializers import StrictModelSerializer
from zones.models import Zone


class ZoneSerializer(StrictModelSerializer):
    """
    Accepts either a full GeoJSON `area` or the bare `coordinates` the map
    draw tool produces (`[[ [lng, lat], ... ]]`). The stored ring is always
    closed and keeps the vertex order it was drawn in.
    """
    area = PolygonField(required=False)
    coordinates = serializers.JSONField(write_only=True, required=False)
    owner = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Zone
        fields = [
            "id",
            "name",
            "description",
            "area",
            "coordinates",
            "owner",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "owner", "created_at", "updated_at"]

    def validate(self, data):
        coordinates = data.pop("coordinates", None)
        if coordinates is not None:
            if "area" in data:
                raise serializers.ValidationError(
                    {"coordinates": ["Send either area or coordinates, not both."]}
                )
            ring = self.fields["area"].ring_from_coordinates(coordinates)
            data["area"] = {"type": "Polygon", "coordinates": [ring]}
        if self.instance is None and "area" not in data:
            raise serializers.ValidationError({"area": ["This field is required."]})
        return data
