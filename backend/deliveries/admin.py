from django.contrib import admin

from deliveries.models import Delivery


@admin.register(Delivery)
class DeliveryAdmin(admin.ModelAdmin):
    list_display = ["id", "client", "driver", "status", "priority", "owner", "created_at"]
    list_filter = ["status", "priority"]
    search_fields = ["description", "client__name", "driver__name"]
