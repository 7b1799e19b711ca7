from common.views import OwnedResourceViewSet
from deliveries.models import Delivery
from deliveries.serializers import DeliverySerializer


class DeliveryViewSet(OwnedResourceViewSet):
    """
    Deliveries of the authenticated user with client and driver resolved.
    Optional filters: ?status=pending&priority=high
    """
    model = Delivery
    serializer_class = DeliverySerializer
    entity_type = "deliveries"

    def get_queryset(self):
        queryset = super().get_queryset().select_related("client", "driver")
        params = self.request.query_params
        if params.get("status"):
            queryset = queryset.filter(status=params["status"])
        if params.get("priority"):
            queryset = queryset.filter(priority=params["priority"])
        return queryset
