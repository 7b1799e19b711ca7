import logging
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from changelogs.models import ChangeLog

logger = logging.getLogger(__name__)


def record_change(actor, entity_type: str, entity_id: int, action: str, changes=None) -> ChangeLog:
    """Persist one audit entry for a mutation made through the API."""
    entry = ChangeLog.objects.create(
        actor=actor,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        changes=changes or {},
    )
    logger.info("%s %s#%s by user %s", action, entity_type, entity_id, actor.pk)
    return entry


def prune_change_logs(days: int = None, dry_run: bool = False) -> int:
    """Delete entries older than the retention window. Returns how many matched."""
    days = settings.CHANGE_LOG_RETENTION_DAYS if days is None else days
    cutoff = timezone.now() - timedelta(days=days)
    old_logs = ChangeLog.objects.filter(created_at__lt=cutoff)
    count = old_logs.count()
    if not dry_run:
        old_logs.delete()
        logger.info("Pruned %s change logs older than %s days", count, days)
    return count
