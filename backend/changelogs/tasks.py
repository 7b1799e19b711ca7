"""Celery tasks for audit trail maintenance."""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def prune_change_logs_task(days: int = None):
    """Scheduled daily by beat; deletes change logs past the retention window."""
    from changelogs.services import prune_change_logs

    try:
        return prune_change_logs(days=days)
    except Exception:
        logger.exception("Change log pruning failed")
        raise
