"""
Countdown API views.

    GET /api/settings/countdown/   - current settings (defaults when unset)
    PUT /api/settings/countdown/   - overwrite (editor)
"""

from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsEditorOrReadOnly
from apps.core.throttling import BurstThrottle

from .serializers import CountdownInputSerializer, CountdownSerializer
from .services import CountdownService


class CountdownSettingsView(APIView):
    permission_classes = [IsEditorOrReadOnly]
    throttle_classes = [BurstThrottle]
    service_class = CountdownService

    def get_service(self) -> CountdownService:
        return self.service_class()

    def get(self, request):
        return Response(CountdownSerializer(self.get_service().get()).data)

    def put(self, request):
        serializer = CountdownInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        saved = self.get_service().set(request.user, dict(serializer.validated_data))
        return Response(CountdownSerializer(saved).data)
