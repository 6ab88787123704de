"""
Grouping of events for the listings.

Multi-day events are grouped under their start date.
"""

import datetime
import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional

from django.utils.dateparse import parse_date

from .dates import start_key

logger = logging.getLogger(__name__)


def _start_date(event: Dict[str, Any]) -> Optional[datetime.date]:
    try:
        return parse_date(start_key(event.get('date')))
    except ValueError:
        return None


def group_by_date(events: Iterable[Dict[str, Any]], direction: str = 'desc') -> List[Dict[str, Any]]:
    """
    Admin table groups: one per start date, keys sorted by `direction`.

    Events keep their incoming order inside a group.
    """
    groups: Dict[str, List[Dict[str, Any]]] = OrderedDict()
    for event in events:
        groups.setdefault(start_key(event.get('date')), []).append(event)

    def sort_key(key):
        parsed = _start_date({'date': key})
        return (parsed is not None, parsed or datetime.date.min, key)

    keys = sorted(groups, key=sort_key, reverse=(direction == 'desc'))
    return [{'date': key, 'events': groups[key]} for key in keys]


def group_by_month(events: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Public timeline: month/year groups, newest month first and newest event
    first inside each month.
    """
    groups: Dict[datetime.date, List] = {}
    for event in events:
        start = _start_date(event)
        if start is None:
            logger.warning("Event %s has an unreadable date %r", event.get('id'), event.get('date'))
            continue
        groups.setdefault(start.replace(day=1), []).append((start, event))

    timeline = []
    for month in sorted(groups, reverse=True):
        entries = sorted(groups[month], key=lambda entry: entry[0], reverse=True)
        timeline.append({
            'month': month.strftime('%Y-%m'),
            'label': month.strftime('%B %Y'),
            'events': [event for _, event in entries],
        })
    return timeline
