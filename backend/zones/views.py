from rest_framework.decorators import action
from rest_framework.response import Response

from common.views import OwnedResourceViewSet
from zones.models import Zone
from zones.serializers import ZoneSerializer
from zones.services import entities_in_zone


class ZoneViewSet(OwnedResourceViewSet):
    model = Zone
    serializer_class = ZoneSerializer
    entity_type = "zones"
    location_field = None

    @action(detail=True, methods=["get"])
    def contents(self, request, pk=None):
        """Entities of the caller lying inside the zone, grouped by family."""
        zone = self.get_object()
        return Response({"zone": zone.pk, **entities_in_zone(zone)})
