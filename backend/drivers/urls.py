from rest_framework.routers import SimpleRouter

from .views import DriverViewSet

router = SimpleRouter()
router.register("", DriverViewSet, basename="driver")

urlpatterns = router.urls
