"""
Countdown settings.

Stored as the single document settings/countdown. Until an editor saves it,
reads fall back to a countdown NEWSROOM_COUNTDOWN_DEFAULT_DAYS from now.
"""

import datetime
import logging
from typing import Any, Dict, Optional

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.core.documents import SETTINGS, default_repository, server_timestamp
from apps.core.exceptions import ValidationError
from apps.core.permissions import require_authenticated

logger = logging.getLogger(__name__)

COUNTDOWN_DOC_ID = 'countdown'


def format_timestamp(value: datetime.datetime) -> str:
    """UTC ISO-8601 with millisecond precision, as the document store writes it."""
    value = value.astimezone(datetime.timezone.utc)
    return value.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_target_date(value: Any) -> Optional[datetime.datetime]:
    """
    Aware datetime for an ISO date or datetime string, or None.

    Naive values are read in the project time zone; a bare date means its
    midnight.
    """
    if isinstance(value, datetime.datetime):
        parsed = value
    else:
        text = str(value or '').strip()
        if not text:
            return None
        try:
            parsed = parse_datetime(text)
            if parsed is None:
                day = parse_date(text)
                if day is None:
                    return None
                parsed = datetime.datetime.combine(day, datetime.time.min)
        except ValueError:
            return None

    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


class CountdownService:
    """Read and write the countdown settings document."""

    def __init__(self, repository=None, clock=None):
        self.repository = repository or default_repository
        self.clock = clock or timezone.now

    def defaults(self) -> Dict[str, Any]:
        target = self.clock() + datetime.timedelta(days=settings.NEWSROOM_COUNTDOWN_DEFAULT_DAYS)
        return {
            'enabled': True,
            'targetDate': format_timestamp(target),
            'title': settings.NEWSROOM_COUNTDOWN_DEFAULT_TITLE,
            'updatedAt': None,
        }

    def get(self) -> Dict[str, Any]:
        document = self.repository.get(SETTINGS, COUNTDOWN_DOC_ID)
        if document is None:
            return self.defaults()
        return {
            'enabled': bool(document.get('enabled', True)),
            'targetDate': document.get('targetDate'),
            'title': document.get('title', ''),
            'updatedAt': document.get('updatedAt'),
        }

    def set(self, user, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Overwrite the countdown settings.

        Raises:
            ValidationError: targetDate is not a readable date
        """
        require_authenticated(user)
        target = parse_target_date(data.get('targetDate'))
        if target is None:
            raise ValidationError("Target date must be a valid date", field='targetDate')

        document = {
            'enabled': bool(data.get('enabled', True)),
            'targetDate': format_timestamp(target),
            'title': data.get('title') or '',
            'updatedAt': server_timestamp(),
        }
        self.repository.set(SETTINGS, COUNTDOWN_DOC_ID, document)
        logger.info("Countdown settings updated by %s", user.pk)
        return document
