from django.conf import settings
from django.db import models


class OwnedModel(models.Model):
    """
    Base for every entity family.

    Rows belong to exactly one user and carry a version number that is bumped
    on each update, so clients can opt into conditional writes.
    """
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='+',
    )
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']
