from clients.models import Client
from clients.serializers import ClientSerializer
from common.views import OwnedResourceViewSet


class ClientViewSet(OwnedResourceViewSet):
    """Deleting a client deletes its deliveries with it."""
    model = Client
    serializer_class = ClientSerializer
    entity_type = "clients"

    def related_changes(self, instance):
        return [
            ("deliveries", pk, "delete", {"client": instance.pk})
            for pk in instance.deliveries.values_list("pk", flat=True)
        ]
