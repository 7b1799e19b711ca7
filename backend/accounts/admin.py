from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from accounts.models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin panel for dashboard users"""

    list_display = [
        "email",
        "name",
        "is_active",
        "is_staff",
        "date_joined",
    ]

    list_filter = [
        "is_active",
        "is_staff",
        "date_joined",
    ]

    search_fields = [
        "email",
        "name",
    ]

    ordering = ("email",)

    fieldsets = BaseUserAdmin.fieldsets + (
        ("Dashboard", {"fields": ("name",)}),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Dashboard", {"fields": ("email", "name")}),
    )
