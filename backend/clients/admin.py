from django.contrib import admin

from clients.models import Client


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ["name", "phone", "owner", "created_at"]
    search_fields = ["name", "address", "phone", "owner__email"]
