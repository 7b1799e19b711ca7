from django.db import models

from common.models import OwnedModel


class Zone(OwnedModel):
    """Freehand polygon drawn on the map"""
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    # {"type": "Polygon", "coordinates": [[[lng, lat], ..., first vertex again]]}
    area = models.JSONField()

    class Meta(OwnedModel.Meta):
        db_table = 'zones'

    def __str__(self):
        return self.name

    @property
    def ring(self):
        return self.area["coordinates"][0]
