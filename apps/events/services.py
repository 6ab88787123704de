"""
Event services: editor CRUD, listings, the ticker and status refresh.

The editor form sends the start date in `date` and, for multi-day events,
the last day in `endDate`. Before saving they are combined into a DateSpec,
sub-event days are checked against the new day count and the status is
computed for the current time.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from django.utils import timezone

from apps.articles.search import EVENT_SEARCH_FIELDS, SortState, filter_documents
from apps.core.documents import EVENTS, Query, default_repository, server_timestamp
from apps.core.exceptions import FormValidationError, NotFoundError, ValidationError
from apps.core.models import generate_doc_id
from apps.core.permissions import require_authenticated

from .dates import (
    RANGE_SEPARATOR,
    DateSpec,
    build_date_spec,
    is_multi_day,
    parse_date_spec,
    reset_out_of_range_days,
)
from .grouping import group_by_date, group_by_month
from .status import STATUSES, status_for

logger = logging.getLogger(__name__)


SORT_FIELDS = ('date', 'title', 'status')

TICKER_LIMIT = 10

EVENT_FIELDS = (
    ('time', "Time is required"),
    ('location', "Location is required"),
    ('description', "Description is required"),
    ('organizer', "Organizer is required"),
)

SUB_EVENT_FIELDS = (
    ('title', "Title is required"),
    ('time', "Time is required"),
    ('location', "Location is required"),
    ('description', "Description is required"),
)


def _blank(value: Any) -> bool:
    return not str(value if value is not None else '').strip()


def split_stored_date(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Editor view of a stored event: `date` is the start, `endDate` the last
    day ('' for single-day events) and `multiDay` says which.
    """
    value = event.get('date') or ''
    if is_multi_day(value):
        start, end = (part.strip() for part in value.split(RANGE_SEPARATOR, 1))
        return {**event, 'date': start, 'endDate': end, 'multiDay': True}
    return {**event, 'endDate': '', 'multiDay': False}


def normalize_form(data: Dict[str, Any]) -> Dict[str, Any]:
    """Accept a stored-style "start to end" date in place of date + endDate."""
    if is_multi_day(data.get('date')) and _blank(data.get('endDate')):
        return split_stored_date(data)
    return data


def ticker_label(spec: DateSpec) -> str:
    """Short display date: "Apr 5", or "Apr 4–Apr 6" for a range."""
    def short(day):
        return f"{day.strftime('%b')} {day.day}"

    if spec.end is None:
        return short(spec.start)
    return f"{short(spec.start)}–{short(spec.end)}"


class EventService:
    """Event reads and writes over the document repository."""

    def __init__(self, repository=None, clock: Optional[Callable] = None):
        self.repository = repository or default_repository
        self.clock = clock or timezone.now

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def multi_day(data: Dict[str, Any]) -> bool:
        if 'multiDay' in data:
            return bool(data['multiDay'])
        return bool(data.get('endDate')) or is_multi_day(data.get('date'))

    def validate(self, data: Dict[str, Any]) -> List[ValidationError]:
        """Every field error of the event form, sub-event errors last."""
        data = normalize_form(data)
        errors = []
        multi_day = self.multi_day(data)
        start, end = data.get('date'), data.get('endDate')

        if _blank(data.get('title')):
            errors.append(ValidationError("Title is required", field='title'))

        if _blank(start):
            errors.append(ValidationError("Date is required", field='date'))
        if multi_day and _blank(end):
            errors.append(ValidationError("End date is required for multi-day events", field='endDate'))

        if not _blank(start) and not (multi_day and _blank(end)):
            try:
                spec = build_date_spec(start, end if multi_day else None)
            except ValueError:
                errors.append(ValidationError("Date must be a valid date (YYYY-MM-DD)", field='date'))
            else:
                if spec.is_multi_day and spec.end < spec.start:
                    errors.append(ValidationError("End date must be after start date", field='endDate'))

        for name, message in EVENT_FIELDS:
            if _blank(data.get(name)):
                errors.append(ValidationError(message, field=name))

        for index, sub_event in enumerate(data.get('subEvents') or []):
            prefix = f"subEvents[{index}]"
            for name, message in SUB_EVENT_FIELDS:
                if _blank(sub_event.get(name)):
                    errors.append(ValidationError(message, field=f"{prefix}.{name}"))
            if multi_day:
                day = sub_event.get('day')
                if _blank(day):
                    errors.append(ValidationError("Day is required for multi-day events", field=f"{prefix}.day"))
                else:
                    try:
                        int(day)
                    except (TypeError, ValueError):
                        errors.append(ValidationError("Day must be a number", field=f"{prefix}.day"))

        return errors

    def build(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Storable event document from a validated form."""
        data = normalize_form(data)
        multi_day = self.multi_day(data)
        spec: DateSpec = build_date_spec(data['date'], data.get('endDate') if multi_day else None)

        sub_events = []
        for sub_event in data.get('subEvents') or []:
            cleaned = {
                'id': sub_event.get('id') or generate_doc_id(),
                'title': sub_event.get('title', ''),
                'time': sub_event.get('time', ''),
                'location': sub_event.get('location', ''),
                'description': sub_event.get('description', ''),
            }
            if spec.is_multi_day:
                cleaned['day'] = int(sub_event['day'])
            sub_events.append(cleaned)

        if spec.is_multi_day:
            sub_events = reset_out_of_range_days(sub_events, spec.day_count)

        return {
            'title': data['title'].strip(),
            'date': spec.serialize(),
            'time': data['time'].strip(),
            'location': data['location'].strip(),
            'description': data['description'].strip(),
            'organizer': data['organizer'].strip(),
            'featured': bool(data.get('featured', False)),
            'status': status_for(spec, data['time'], self.clock()),
            'subEvents': sub_events,
        }

    # =========================================================================
    # Editor
    # =========================================================================

    def get_event(self, user, event_id: str) -> Dict[str, Any]:
        require_authenticated(user)
        event = self.repository.get(EVENTS, event_id)
        if event is None:
            raise NotFoundError(EVENTS, event_id)
        return event

    def create_event(self, user, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Raises:
            FormValidationError: one entry per failing field
        """
        require_authenticated(user)
        errors = self.validate(data)
        if errors:
            raise FormValidationError(errors)

        now = server_timestamp()
        event_id = self.repository.create(EVENTS, {**self.build(data), 'createdAt': now, 'updatedAt': now})
        logger.info("Event %s created by %s", event_id, user.pk)
        return self.repository.get(EVENTS, event_id)

    def update_event(self, user, event_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Replace every editable field of an event."""
        self.get_event(user, event_id)
        errors = self.validate(data)
        if errors:
            raise FormValidationError(errors)

        self.repository.update(EVENTS, event_id, {**self.build(data), 'updatedAt': server_timestamp()})
        logger.info("Event %s updated by %s", event_id, user.pk)
        return self.repository.get(EVENTS, event_id)

    def delete_event(self, user, event_id: str) -> None:
        require_authenticated(user)
        self.repository.delete(EVENTS, event_id)
        logger.info("Event %s deleted by %s", event_id, user.pk)

    def list_events(
        self,
        user,
        status: Optional[str] = None,
        sort: Optional[SortState] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Admin table: [{date, events}] grouped by start date."""
        require_authenticated(user)
        sort = sort or SortState('date', 'desc')

        if status and status != 'all' and status not in STATUSES:
            raise ValidationError(f"Status must be one of: all, {', '.join(STATUSES)}", field='status')

        query = Query().ordered(sort.field, sort.direction)
        if status and status != 'all':
            query = query.where('status', '==', status)

        events = filter_documents(self.repository.query(EVENTS, query), search, EVENT_SEARCH_FIELDS)
        return group_by_date(events, sort.direction)

    # =========================================================================
    # Public
    # =========================================================================

    def public_events(self) -> Dict[str, Any]:
        """
        Featured events plus a month/year timeline of the rest, newest first.
        """
        events = self.repository.query(EVENTS, Query().ordered('date', 'desc'))
        featured = [event for event in events if event.get('featured')]
        others = [event for event in events if not event.get('featured')]
        return {'featured': featured, 'groups': group_by_month(others)}

    def ticker(self, limit: int = TICKER_LIMIT, now=None) -> List[Dict[str, Any]]:
        """
        Events still running today or later, soonest first, for the ticker tape.

        A multi-day event stays on the ticker through its last day.
        """
        today = timezone.localdate(now or self.clock())
        items = []
        for event in self.repository.query(EVENTS, Query().ordered('date', 'asc')):
            if len(items) >= limit:
                break
            try:
                spec = parse_date_spec(event.get('date') or '')
            except ValueError:
                logger.warning("Skipping ticker entry for event %s: bad date %r", event['id'], event.get('date'))
                continue

            if (spec.end or spec.start) < today:
                continue
            items.append({
                'id': event['id'],
                'title': event.get('title', ''),
                'date': event.get('date'),
                'label': ticker_label(spec),
            })
        return items

    # =========================================================================
    # Status refresh
    # =========================================================================

    def refresh_statuses(self, now=None) -> List[str]:
        """
        Recompute the status of every event and store the ones that changed.

        Returns the ids of updated events.
        """
        now = now or self.clock()
        changed = []
        for event in self.repository.query(EVENTS):
            try:
                spec = parse_date_spec(event.get('date') or '')
            except ValueError:
                logger.warning("Skipping status refresh of event %s: bad date %r", event['id'], event.get('date'))
                continue

            status = status_for(spec, event.get('time'), now)
            if status != event.get('status'):
                self.repository.update(EVENTS, event['id'], {'status': status})
                changed.append(event['id'])

        if changed:
            logger.info("Refreshed status of %d events", len(changed))
        return changed
