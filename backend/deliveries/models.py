from django.db import models

from common.models import OwnedModel


class Delivery(OwnedModel):
    """A drop-off for one client, optionally assigned to a driver"""

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('assigned', 'Assigned'),
        ('in_transit', 'In Transit'),
        ('delivered', 'Delivered'),
        ('cancelled', 'Cancelled'),
    ]

    PRIORITY_CHOICES = [
        ('normal', 'Normal'),
        ('high', 'High'),
    ]

    # Allowed status moves; writing the current status again is always fine
    TRANSITIONS = {
        'pending': {'assigned', 'cancelled'},
        'assigned': {'pending', 'in_transit', 'cancelled'},
        'in_transit': {'delivered', 'cancelled'},
        'delivered': set(),
        'cancelled': set(),
    }

    client = models.ForeignKey(
        'clients.Client',
        on_delete=models.CASCADE,
        related_name='deliveries'
    )

    driver = models.ForeignKey(
        'drivers.Driver',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='deliveries'
    )

    description = models.TextField(blank=True, default="")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='normal')
    # Drop-off point, GeoJSON longitude first
    location = models.JSONField()

    class Meta(OwnedModel.Meta):
        db_table = 'deliveries'

    def __str__(self):
        return f"Delivery #{self.id} - {self.client} - {self.status}"

    @classmethod
    def can_transition(cls, current: str, new: str) -> bool:
        return current == new or new in cls.TRANSITIONS.get(current, set())
