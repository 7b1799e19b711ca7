from django.conf import settings
from django.db import models


class ChangeLog(models.Model):
    """Audit trail entry written for every create/update/delete on an entity."""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
    ]

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='change_logs',
    )
    entity_type = models.CharField(max_length=20)
    entity_id = models.PositiveBigIntegerField()
    action = models.CharField(max_length=10, choices=ACTION_CHOICES)
    changes = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'change_logs'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.action} {self.entity_type}#{self.entity_id} by {self.actor_id}"
