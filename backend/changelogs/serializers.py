from rest_framework import serializers

from changelogs.models import ChangeLog


class ChangeLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChangeLog
        fields = ["id", "actor", "entity_type", "entity_id", "action", "changes", "created_at"]
        read_only_fields = fields
