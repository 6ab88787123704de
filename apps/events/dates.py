"""
Event dates.

An event happens on one day or on an inclusive range of days:

    DateSpec = Single(date) | Range(start, end)

Stored documents keep the date as a string, either "2025-04-05" or
"2025-04-05 to 2025-04-07"; parse_date_spec / DateSpec.serialize convert at
the storage boundary.
"""

import datetime
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from django.utils.dateparse import parse_date

RANGE_SEPARATOR = ' to '


@dataclass(frozen=True)
class Single:
    date: datetime.date

    @property
    def start(self) -> datetime.date:
        return self.date

    @property
    def end(self) -> Optional[datetime.date]:
        return None

    @property
    def is_multi_day(self) -> bool:
        return False

    @property
    def day_count(self) -> int:
        return 1

    def serialize(self) -> str:
        return self.date.isoformat()


@dataclass(frozen=True)
class Range:
    start: datetime.date
    end: datetime.date

    @property
    def is_multi_day(self) -> bool:
        return True

    @property
    def day_count(self) -> int:
        return day_count(self.start, self.end)

    def serialize(self) -> str:
        return f"{self.start.isoformat()}{RANGE_SEPARATOR}{self.end.isoformat()}"


DateSpec = Union[Single, Range]


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    parsed = parse_date(str(value or '').strip())
    if parsed is None:
        raise ValueError(f"Not an ISO date: {value!r}")
    return parsed


def is_multi_day(value: Optional[str]) -> bool:
    return RANGE_SEPARATOR in (value or '')


def parse_date_spec(value: str) -> DateSpec:
    """
    Parse a stored event date.

    Raises:
        ValueError: when either side is not an ISO date
    """
    if is_multi_day(value):
        start, end = value.split(RANGE_SEPARATOR, 1)
        return Range(_to_date(start), _to_date(end))
    return Single(_to_date(value))


def build_date_spec(start: Any, end: Any = None) -> DateSpec:
    """DateSpec from the editor's separate start and end fields."""
    if end in (None, ''):
        return Single(_to_date(start))
    return Range(_to_date(start), _to_date(end))


def start_key(value: Optional[str]) -> str:
    """Start-date part of a stored date string, used to group events."""
    return (value or '').split(RANGE_SEPARATOR, 1)[0].strip()


def day_count(start: Any, end: Any) -> int:
    """
    Number of calendar days covered by an inclusive range, at least 1.

    >>> day_count('2025-04-05', '2025-04-07')
    3
    """
    days = (_to_date(end) - _to_date(start)).days + 1
    return max(days, 1)


def reset_out_of_range_days(sub_events: Iterable[Dict[str, Any]], count: int) -> List[Dict[str, Any]]:
    """
    Copy of `sub_events` with every day outside 1..count set back to 1.

    Sub-events without a day are left alone.
    """
    adjusted = []
    for sub_event in sub_events:
        day = sub_event.get('day')
        if isinstance(day, int) and not 1 <= day <= count:
            sub_event = {**sub_event, 'day': 1}
        adjusted.append(sub_event)
    return adjusted
