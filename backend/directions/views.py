import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from deliveries.models import Delivery
from directions.osrm import get_osrm_client
from directions.serializers import DirectionsRequestSerializer

logger = logging.getLogger(__name__)


def _delivery_coordinates(user, delivery_ids=None):
    queryset = Delivery.objects.filter(owner=user)
    if delivery_ids is None:
        return [d.location["coordinates"] for d in queryset.order_by("created_at", "id")]

    by_id = {d.pk: d for d in queryset.filter(pk__in=delivery_ids)}
    missing = [pk for pk in delivery_ids if pk not in by_id]
    if missing:
        raise ValidationError({"delivery_ids": [f"Unknown delivery ids: {missing}"]})
    return [by_id[pk].location["coordinates"] for pk in delivery_ids]


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def compute_route(request):
    """Route through the requested stops using the external routing service"""
    serializer = DirectionsRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    if "coordinates" in data:
        coordinates = data["coordinates"]
    else:
        coordinates = _delivery_coordinates(request.user, data.get("delivery_ids"))

    if len(coordinates) < 2:
        raise ValidationError({"coordinates": ["At least two stops are needed to compute a route."]})

    route = get_osrm_client().route(coordinates)
    return Response(
        {"stops": len(coordinates), **route.to_dict()},
        status=status.HTTP_200_OK,
    )
