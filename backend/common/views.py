"""
Shared view logic for the entity families (places, clients, deliveries, drivers).

Each family gets list / retrieve / create / update / delete scoped to the
authenticated owner. Ids owned by someone else behave exactly like ids that
do not exist (404), for reads and writes alike.
"""

import logging

from django.db import transaction
from rest_framework import viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from changelogs.services import record_change
from common.permissions import IsOwner
from common.utils.geo import calculate_distance, point_lat_lng

logger = logging.getLogger(__name__)


def parse_near(query_params):
    """Parse `?near=lat,lng&radius=meters` into (lat, lng, radius) or None."""
    near = query_params.get("near")
    if not near:
        return None
    try:
        lat_str, lng_str = near.split(",")
        lat, lng = float(lat_str), float(lng_str)
        radius = float(query_params.get("radius", 5000))
    except ValueError:
        raise ValidationError({"near": ["Expected near=<lat>,<lng> and a numeric radius."]})
    return lat, lng, radius


class OwnedResourceViewSet(viewsets.ModelViewSet):
    """
    Subclasses set `model`, `serializer_class`, `entity_type` and
    `location_field` (the GeoJSON point attribute used by `?near=`).
    """
    permission_classes = [IsAuthenticated, IsOwner]
    http_method_names = ["get", "post", "put", "patch", "delete", "head", "options"]
    model = None
    entity_type = None
    location_field = "location"

    def get_queryset(self):
        return self.model.objects.filter(owner=self.request.user)

    # ---------------------- Reads ----------------------

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        near = parse_near(request.query_params) if self.location_field else None
        if near is None:
            serializer = self.get_serializer(queryset, many=True)
            return Response(serializer.data)

        lat, lng, radius = near
        ranked = []
        for obj in queryset:
            position = point_lat_lng(getattr(obj, self.location_field))
            if position is None:
                continue
            distance = calculate_distance(lat, lng, position[0], position[1])
            if distance <= radius:
                ranked.append((distance, obj))
        ranked.sort(key=lambda pair: pair[0])

        data = self.get_serializer([obj for _, obj in ranked], many=True).data
        for item, (distance, _) in zip(data, ranked):
            item["distance_m"] = round(distance, 1)
        return Response(data)

    # ---------------------- Writes ----------------------

    def update(self, request, *args, **kwargs):
        # Fields present in the body overwrite, absent fields keep their value
        kwargs["partial"] = True
        return super().update(request, *args, **kwargs)

    def perform_create(self, serializer):
        instance = serializer.save(owner=self.request.user)
        record_change(
            self.request.user, self.entity_type, instance.pk, "create",
            self._changes(serializer),
        )

    def perform_update(self, serializer):
        instance = serializer.save()
        changes = self._changes(serializer)
        record_change(self.request.user, self.entity_type, instance.pk, "update", changes)
        self.after_update(instance, changes)

    def perform_destroy(self, instance):
        entity_id = instance.pk
        related = list(self.related_changes(instance))
        with transaction.atomic():
            instance.delete()
            record_change(self.request.user, self.entity_type, entity_id, "delete")
            for entity_type, related_id, action, changes in related:
                record_change(self.request.user, entity_type, related_id, action, changes)

    def after_update(self, instance, changes):
        """Hook for families that react to specific field changes."""

    def related_changes(self, instance):
        """
        Rows the database will cascade to when `instance` is deleted, as
        (entity_type, entity_id, action, changes) tuples to log alongside it.
        """
        return []

    def _changes(self, serializer):
        changes = {}
        for key, value in serializer.validated_data.items():
            if key == "version":
                continue
            raw = serializer.initial_data.get(key, value)
            if isinstance(raw, (str, int, float, bool, dict, list, type(None))):
                changes[key] = raw
        return changes
