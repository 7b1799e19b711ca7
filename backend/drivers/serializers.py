from django.utils import timezone
from rest_framework import serializers

from common.fields import PointField
from common.serializers import StrictModelSerializer
from drivers.models import Driver


class DriverSerializer(StrictModelSerializer):
    """
    Full driver serializer
    """
    current_location = PointField(required=False)
    owner = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Driver
        fields = [
            "id",
            "name",
            "vehicle",
            "capacity",
            "status",
            "current_location",
            "last_location_update",
            "owner",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "owner", "last_location_update", "created_at", "updated_at"]

    def create(self, validated_data):
        if "current_location" in validated_data:
            validated_data["last_location_update"] = timezone.now()
        return super().create(validated_data)

    def update(self, instance, validated_data):
        if "current_location" in validated_data:
            validated_data["last_location_update"] = timezone.now()
        return super().update(instance, validated_data)


class DriverBasicSerializer(serializers.ModelSerializer):
    """
    Lite version of driver info embedded in delivery responses.
    """
    class Meta:
        model = Driver
        fields = [
            "id",
            "name",
            "vehicle",
            "status",
            "current_location",
        ]


class LocationUpdateSerializer(serializers.Serializer):
    """
    Serializer for a position fix sent over HTTP.
    """
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)
