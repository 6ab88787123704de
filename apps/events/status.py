"""
Event status engine.

    upcoming  - the first day has not started, or it is the first/last day
                and the time range has not started yet
    ongoing   - between the two
    completed - the last day is over, or it is the first/last day and the
                time range has ended

Time ranges are read as bare "H:M - H:M" clock values in the project time
zone. Anything after the minutes (such as "AM"/"PM") is ignored, so
"2:00 - 4:00 PM" means 02:00 to 04:00. An unreadable range counts as
ongoing for the whole day.
"""

import datetime
import re
from typing import Optional, Tuple

from django.utils import timezone

from .dates import DateSpec

UPCOMING = 'upcoming'
ONGOING = 'ongoing'
COMPLETED = 'completed'
STATUSES = (UPCOMING, ONGOING, COMPLETED)

TIME_RANGE_SEPARATOR = ' - '
_CLOCK = re.compile(r'^\s*(\d{1,2}):(\d{1,2})')


def parse_clock(value: str) -> Optional[datetime.time]:
    match = _CLOCK.match(value or '')
    if not match:
        return None
    try:
        return datetime.time(int(match.group(1)), int(match.group(2)))
    except ValueError:
        return None


def parse_time_range(value: Optional[str]) -> Optional[Tuple[datetime.time, datetime.time]]:
    """(start, end) clock times of "H:M - H:M", or None."""
    if not value or TIME_RANGE_SEPARATOR not in value:
        return None
    opens, closes = value.split(TIME_RANGE_SEPARATOR, 1)
    opens, closes = parse_clock(opens), parse_clock(closes)
    if opens is None or closes is None:
        return None
    return opens, closes


def compute_status(
    start: datetime.date,
    end: Optional[datetime.date] = None,
    time_range: Optional[str] = None,
    now: Optional[datetime.datetime] = None,
) -> str:
    """Status of an event running from `start` to `end` (inclusive) at `now`."""
    now = now or timezone.now()
    if timezone.is_aware(now):
        now = timezone.localtime(now)
    tz = now.tzinfo

    first_moment = datetime.datetime.combine(start, datetime.time.min, tzinfo=tz)
    last_moment = datetime.datetime.combine(end or start, datetime.time.max, tzinfo=tz)

    if first_moment > now:
        return UPCOMING
    if last_moment < now:
        return COMPLETED

    today = now.date()
    if today == start or (end is not None and today == end):
        bounds = parse_time_range(time_range)
        if bounds:
            opens = datetime.datetime.combine(today, bounds[0], tzinfo=tz)
            closes = datetime.datetime.combine(today, bounds[1], tzinfo=tz)
            if now < opens:
                return UPCOMING
            if now > closes:
                return COMPLETED
            return ONGOING

    return ONGOING


def status_for(spec: DateSpec, time_range: Optional[str] = None, now: Optional[datetime.datetime] = None) -> str:
    return compute_status(spec.start, spec.end, time_range, now)
