from django.db import transaction
from rest_framework import serializers

from common.exceptions import VersionConflict


class StrictModelSerializer(serializers.ModelSerializer):
    """
    Model serializer that refuses keys it does not know about.

    `version` is echoed on reads; when a client sends it on update it becomes a
    precondition and the write fails with 409 if the row moved on meanwhile.
    Without it the update is last-write-wins.
    """
    version = serializers.IntegerField(required=False, min_value=1)

    def to_internal_value(self, data):
        if isinstance(data, dict):
            allowed = {
                name for name, field in self.fields.items() if not field.read_only
            }
            unknown = sorted(set(data) - allowed)
            if unknown:
                raise serializers.ValidationError(
                    {key: ["Unknown field."] for key in unknown}
                )
        return super().to_internal_value(data)

    def create(self, validated_data):
        validated_data.pop("version", None)
        return super().create(validated_data)

    def update(self, instance, validated_data):
        expected = validated_data.pop("version", None)
        with transaction.atomic():
            locked = type(instance).objects.select_for_update().get(pk=instance.pk)
            if expected is not None and expected != locked.version:
                raise VersionConflict(
                    f"Expected version {expected} but current version is {locked.version}."
                )
            for attr, value in validated_data.items():
                setattr(locked, attr, value)
            locked.version = locked.version + 1
            locked.save()
        return locked
