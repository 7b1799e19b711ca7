from rest_framework import generics
from rest_framework.permissions import IsAuthenticated

from changelogs.models import ChangeLog
from changelogs.serializers import ChangeLogSerializer


class ChangeLogListView(generics.ListAPIView):
    """
    GET: the caller's audit trail, newest first.
    Optional filters: ?entity_type=drivers&entity_id=3
    """
    permission_classes = [IsAuthenticated]
    serializer_class = ChangeLogSerializer

    def get_queryset(self):
        queryset = ChangeLog.objects.filter(actor=self.request.user)
        entity_type = self.request.query_params.get("entity_type")
        if entity_type:
            queryset = queryset.filter(entity_type=entity_type)
        entity_id = self.request.query_params.get("entity_id")
        if entity_id and entity_id.isdigit():
            queryset = queryset.filter(entity_id=int(entity_id))
        return queryset
