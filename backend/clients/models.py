from django.db import models

from common.models import OwnedModel


class Client(OwnedModel):
    """A customer that deliveries are made for."""
    name = models.CharField(max_length=200)
    address = models.CharField(max_length=300, blank=True, default="")
    phone = models.CharField(max_length=30, blank=True, default="")
    # GeoJSON point, longitude first; required at creation
    location = models.JSONField()

    class Meta(OwnedModel.Meta):
        db_table = 'clients'

    def __str__(self):
        return self.name
