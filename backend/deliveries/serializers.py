from rest_framework import serializers

from clients.models import Client
from clients.serializers import ClientBasicSerializer
from common.exceptions import InvalidTransition
from common.fields import PointField
from common.serializers import StrictModelSerializer
from deliveries.models import Delivery
from drivers.models import Driver
from drivers.serializers import DriverBasicSerializer


class OwnedPrimaryKeyRelatedField(serializers.PrimaryKeyRelatedField):
    """Only accepts ids of rows owned by the requesting user."""

    def get_queryset(self):
        request = self.context.get("request")
        queryset = super().get_queryset()
        if request is None:
            return queryset.none()
        return queryset.filter(owner=request.user)


class DeliverySerializer(StrictModelSerializer):
    """
    Deliveries are written with client/driver ids and read back with the
    referenced client and driver resolved into nested objects.
    """
    client = OwnedPrimaryKeyRelatedField(queryset=Client.objects.all())
    driver = OwnedPrimaryKeyRelatedField(
        queryset=Driver.objects.all(), required=False, allow_null=True
    )
    location = PointField()
    owner = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Delivery
        fields = [
            "id",
            "client",
            "driver",
            "description",
            "status",
            "priority",
            "location",
            "owner",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "owner", "created_at", "updated_at"]

    def validate_status(self, value):
        if self.instance is not None and not Delivery.can_transition(self.instance.status, value):
            raise InvalidTransition(
                f"Cannot move a delivery from '{self.instance.status}' to '{value}'."
            )
        return value

    def to_representation(self, instance):
        representation = super().to_representation(instance)
        representation["client"] = ClientBasicSerializer(instance.client).data
        representation["driver"] = (
            DriverBasicSerializer(instance.driver).data if instance.driver_id else None
        )
        return representation
