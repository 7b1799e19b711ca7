from rest_framework import serializers

from common.fields import PointField
from common.serializers import StrictModelSerializer
from places.models import Place


class PlaceSerializer(StrictModelSerializer):
    location = PointField()
    owner = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Place
        fields = [
            "id",
            "name",
            "description",
            "location",
            "owner",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "owner", "created_at", "updated_at"]
