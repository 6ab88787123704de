"""
Event API views.

Editor endpoints (IsEditor):
    GET    /api/events/?status=&sort=&dir=&toggle=&search=   - [{date, events}]
    POST   /api/events/
    GET    /api/events/{id}/
    PUT    /api/events/{id}/
    DELETE /api/events/{id}/

Public:
    GET /api/events/public/    - {featured, groups}
    GET /api/events/ticker/    - [{id, title, date, label}], at most 10
"""

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.articles.search import SortState
from apps.core.exceptions import created_response
from apps.core.permissions import IsEditor
from apps.core.throttling import BurstThrottle

from .serializers import (
    DateGroupSerializer,
    EventDetailSerializer,
    EventInputSerializer,
    PublicEventsSerializer,
    TickerItemSerializer,
)
from .services import SORT_FIELDS, EventService

logger = logging.getLogger(__name__)


def _form(request):
    serializer = EventInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    form = dict(serializer.validated_data)
    form['subEvents'] = [dict(sub_event) for sub_event in form.get('subEvents', [])]
    return form


class EventServiceMixin:
    """Gives a view its EventService."""

    service_class = EventService

    def get_service(self) -> EventService:
        return self.service_class()


class EventListCreateView(EventServiceMixin, APIView):
    permission_classes = [IsEditor]
    throttle_classes = [BurstThrottle]

    def get(self, request):
        params = request.query_params
        sort = SortState.from_params(
            params.get('sort'),
            params.get('dir'),
            SORT_FIELDS,
            toggle=params.get('toggle'),
        )
        groups = self.get_service().list_events(
            request.user,
            status=params.get('status'),
            sort=sort,
            search=params.get('search'),
        )
        return Response(DateGroupSerializer(groups, many=True).data)

    def post(self, request):
        event = self.get_service().create_event(request.user, _form(request))
        return created_response(EventDetailSerializer(event).data)


class EventDetailView(EventServiceMixin, APIView):
    permission_classes = [IsEditor]
    throttle_classes = [BurstThrottle]

    def get(self, request, pk):
        event = self.get_service().get_event(request.user, pk)
        return Response(EventDetailSerializer(event).data)

    def put(self, request, pk):
        event = self.get_service().update_event(request.user, pk, _form(request))
        return Response(EventDetailSerializer(event).data)

    def delete(self, request, pk):
        self.get_service().delete_event(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PublicEventsView(EventServiceMixin, APIView):
    """Featured events and the month/year timeline."""

    permission_classes = [AllowAny]
    throttle_classes = [BurstThrottle]

    def get(self, request):
        return Response(PublicEventsSerializer(self.get_service().public_events()).data)


class EventTickerView(EventServiceMixin, APIView):
    """Upcoming and running events for the ticker tape, soonest first."""

    permission_classes = [AllowAny]
    throttle_classes = [BurstThrottle]

    def get(self, request):
        return Response(TickerItemSerializer(self.get_service().ticker(), many=True).data)
