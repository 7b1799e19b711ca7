from django.contrib import admin
from django.urls import path, include

from .views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path("health/", health_check), # Health check endpoint

    # Authentication endpoints (register, login, refresh, me)
    path('api/auth/', include('accounts.urls')),

    # Entity families (list/create/update/delete, owner scoped)
    path('api/places/', include('places.urls')),
    path('api/clients/', include('clients.urls')),
    path('api/deliveries/', include('deliveries.urls')),
    path('api/drivers/', include('drivers.urls')),

    # Drawn zones and the audit trail
    path('api/zones/', include('zones.urls')),
    path('api/logs/', include('changelogs.urls')),

    # Route computation through the external routing service
    path('api/directions/', include('directions.urls')),
]
