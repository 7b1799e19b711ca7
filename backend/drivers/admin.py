from django.contrib import admin
from drivers.models import Driver


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    """Admin panel for managing drivers"""

    list_display = [
        "name",
        "vehicle",
        "capacity",
        "status",
        "owner",
        "last_location_update",
    ]

    list_filter = [
        "status",
        "last_location_update",
    ]

    search_fields = [
        "name",
        "vehicle",
        "owner__email",
    ]

    readonly_fields = [
        "last_location_update",
    ]

    ordering = ("name",)
