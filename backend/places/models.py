from django.db import models

from common.models import OwnedModel


class Place(OwnedModel):
    """A named point of interest on the map."""
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    # GeoJSON point, longitude first
    location = models.JSONField()

    class Meta(OwnedModel.Meta):
        db_table = 'places'

    def __str__(self):
        return self.name
