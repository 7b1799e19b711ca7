from rest_framework import serializers

from clients.models import Client
from common.fields import PointField
from common.serializers import StrictModelSerializer


class ClientSerializer(StrictModelSerializer):
    location = PointField()
    owner = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Client
        fields = [
            "id",
            "name",
            "address",
            "phone",
            "location",
            "owner",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "owner", "created_at", "updated_at"]


class ClientBasicSerializer(serializers.ModelSerializer):
    """
    Lite version embedded in delivery responses.
    """
    class Meta:
        model = Client
        fields = ["id", "name", "address", "phone", "location"]
