from django.contrib import admin

from changelogs.models import ChangeLog


@admin.register(ChangeLog)
class ChangeLogAdmin(admin.ModelAdmin):
    list_display = ["entity_type", "entity_id", "action", "actor", "created_at"]
    list_filter = ["entity_type", "action"]
    search_fields = ["actor__email"]
    readonly_fields = ["actor", "entity_type", "entity_id", "action", "changes", "created_at"]
