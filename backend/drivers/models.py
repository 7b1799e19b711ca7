from django.db import models

from common.models import OwnedModel
from common.utils.geo import make_point


def origin_point():
    """Where a driver sits until it is placed on the map."""
    return make_point(0.0, 0.0)


class Driver(OwnedModel):
    """Delivery driver with capacity, availability and last known position"""
    STATUS_CHOICES = [
        ('available', 'Available'),
        ('busy', 'Busy'),
        ('offline', 'Offline'),
    ]

    name = models.CharField(max_length=200)
    vehicle = models.CharField(max_length=100, blank=True, default="")
    capacity = models.PositiveIntegerField(default=10)

    # Status & location (GeoJSON point, longitude first)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='available')
    current_location = models.JSONField(default=origin_point)
    last_location_update = models.DateTimeField(null=True, blank=True)

    class Meta(OwnedModel.Meta):
        db_table = 'drivers'

    def __str__(self):
        return f"{self.name} - {self.vehicle}" if self.vehicle else self.name
