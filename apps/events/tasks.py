"""
Celery tasks for events.
"""

import logging

from celery import shared_task

from .services import EventService

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=2)
def refresh_event_statuses(self):
    """
    Recompute stored event statuses.

    Scheduled by celery beat every EVENT_STATUS_REFRESH_MINUTES so a status
    saved as "upcoming" moves on without waiting for the next edit.
    """
    try:
        changed = EventService().refresh_statuses()
        return {"updated": len(changed), "event_ids": changed}
    except Exception as exc:
        logger.error("Event status refresh failed: %s", exc)
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))
