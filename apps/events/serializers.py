"""
Event serializers.
"""

from rest_framework import serializers

from .dates import parse_date_spec
from .services import split_stored_date


# ============================================================================
# Input
# ============================================================================

class SubEventInputSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True)
    title = serializers.CharField(required=False, allow_blank=True)
    time = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    day = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class EventInputSerializer(serializers.Serializer):
    """
    Event editor form.

    `date` is the first day; multi-day events also send `endDate` (and may
    send `multiDay` explicitly). A stored "start to end" date is accepted too.
    """

    title = serializers.CharField(required=False, allow_blank=True)
    date = serializers.CharField(required=False, allow_blank=True)
    endDate = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    multiDay = serializers.BooleanField(required=False)
    time = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    organizer = serializers.CharField(required=False, allow_blank=True)
    featured = serializers.BooleanField(required=False, default=False)
    subEvents = SubEventInputSerializer(many=True, required=False)


# ============================================================================
# Output
# ============================================================================

class EventSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    title = serializers.CharField(read_only=True, default='')
    date = serializers.CharField(read_only=True, default='')
    time = serializers.CharField(read_only=True, default='')
    location = serializers.CharField(read_only=True, default='')
    description = serializers.CharField(read_only=True, default='')
    organizer = serializers.CharField(read_only=True, default='')
    featured = serializers.BooleanField(read_only=True, default=False)
    status = serializers.CharField(read_only=True, default='upcoming')
    subEvents = serializers.ListField(child=serializers.DictField(), read_only=True, default=list)
    createdAt = serializers.CharField(read_only=True, default=None)
    updatedAt = serializers.CharField(read_only=True, default=None)


class EventDetailSerializer(EventSerializer):
    """Event as the editor form loads it: start and end split apart."""

    startDate = serializers.SerializerMethodField()
    endDate = serializers.SerializerMethodField()
    multiDay = serializers.SerializerMethodField()
    dayCount = serializers.SerializerMethodField()

    def get_startDate(self, obj) -> str:
        return split_stored_date(obj)['date']

    def get_endDate(self, obj) -> str:
        return split_stored_date(obj)['endDate']

    def get_multiDay(self, obj) -> bool:
        return split_stored_date(obj)['multiDay']

    def get_dayCount(self, obj) -> int:
        try:
            return parse_date_spec(obj.get('date') or '').day_count
        except ValueError:
            return 1


class DateGroupSerializer(serializers.Serializer):
    date = serializers.CharField()
    events = EventSerializer(many=True)


class MonthGroupSerializer(serializers.Serializer):
    month = serializers.CharField()
    label = serializers.CharField()
    events = EventSerializer(many=True)


class PublicEventsSerializer(serializers.Serializer):
    featured = EventSerializer(many=True)
    groups = MonthGroupSerializer(many=True)


class TickerItemSerializer(serializers.Serializer):
    id = serializers.CharField()
    title = serializers.CharField()
    date = serializers.CharField()
    label = serializers.CharField()
