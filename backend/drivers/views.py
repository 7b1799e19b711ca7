from django.db import transaction
from rest_framework.decorators import action
from rest_framework.response import Response

from changelogs.services import record_change
from common.views import OwnedResourceViewSet
from drivers import services
from drivers.models import Driver
from drivers.serializers import DriverSerializer, LocationUpdateSerializer


class DriverViewSet(OwnedResourceViewSet):
    """
    Drivers of the authenticated user.

    An update whose body carries `current_location` is announced on the live
    relay after it commits.
    """
    model = Driver
    serializer_class = DriverSerializer
    entity_type = "drivers"
    location_field = "current_location"

    def get_queryset(self):
        queryset = super().get_queryset()
        status_filter = self.request.query_params.get("status")
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return queryset

    def after_update(self, instance, changes):
        if "current_location" in changes:
            services.announce_location(instance)

    def related_changes(self, instance):
        # assigned deliveries lose their driver
        return [
            ("deliveries", pk, "update", {"driver": None})
            for pk in instance.deliveries.values_list("pk", flat=True)
        ]

    @action(detail=True, methods=["post"], url_path="location")
    def location(self, request, pk=None):
        """POST {"lat": .., "lng": ..}: durable position write plus relay announcement."""
        driver = self.get_object()
        serializer = LocationUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lat = serializer.validated_data["lat"]
        lng = serializer.validated_data["lng"]
        with transaction.atomic():
            driver = services.update_driver_location(driver, lat, lng)
            record_change(
                request.user, self.entity_type, driver.pk, "update",
                {"current_location": driver.current_location},
            )

        return Response(DriverSerializer(driver, context=self.get_serializer_context()).data)
