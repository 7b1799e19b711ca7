import logging

import redis
from channels.layers import get_channel_layer
from django.conf import settings
from django.db import connection
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from changelogs.tasks import prune_change_logs_task

logger = logging.getLogger(__name__)


def _check_database():
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")


def _redis_in_use():
    backend = settings.CHANNEL_LAYERS.get("default", {}).get("BACKEND", "")
    return "redis" in backend.lower()


def _check_redis():
    if not _redis_in_use():
        return "skipped: channel layer is not Redis-backed"
    redis.Redis.from_url(settings.REDIS_URL, socket_timeout=3).ping()


def _check_channel_layer():
    if get_channel_layer() is None:
        raise RuntimeError("no channel layer configured")


def _check_celery():
    if prune_change_logs_task.name not in prune_change_logs_task.app.tasks:
        raise RuntimeError("maintenance task not registered")


CHECKS = (
    ("database", _check_database),
    ("redis", _check_redis),
    ("channels", _check_channel_layer),
    ("celery", _check_celery),
)


@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """Health check endpoint for monitoring; 503 if any dependency is down"""
    services = {}
    for name, check in CHECKS:
        try:
            services[name] = check() or "healthy"
        except Exception as e:
            services[name] = f"unhealthy: {e}"

    healthy = not any(state.startswith("unhealthy") for state in services.values())
    if not healthy:
        logger.warning("Health check degraded: %s", services)

    return Response(
        {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
    )
