from common.views import OwnedResourceViewSet
from places.models import Place
from places.serializers import PlaceSerializer


class PlaceViewSet(OwnedResourceViewSet):
    model = Place
    serializer_class = PlaceSerializer
    entity_type = "places"
