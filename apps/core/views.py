"""
Health and editor session views.

Health endpoints are plain Django views so probes never go through DRF
authentication or throttling. Session endpoints issue and revoke the JWT
pairs editors use for every admin operation.
"""

import logging

from django.conf import settings
from django.http import JsonResponse
from django.views import View

from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from apps.core.documents import ARTICLES, EVENTS, SUBMISSIONS, Filter, default_repository
from apps.core.exceptions import UpstreamError, ValidationError
from apps.core.observability import HealthStatus, health_checker, register_default_checks
from apps.core.serializers import EditorSerializer, EditorTokenObtainPairSerializer, LogoutSerializer

logger = logging.getLogger(__name__)

register_default_checks()


def _health_response(payload, status):
    return JsonResponse(payload, status=200 if status != HealthStatus.UNHEALTHY.value else 503)


class HealthCheckView(View):
    """
    GET /health/              every check
    GET /health/<check_name>/ one check
    """

    def get(self, request, check_name=None):
        if check_name:
            result = health_checker.check(check_name)
            return _health_response(result.to_dict(), result.status.value)

        results = health_checker.check_all()
        return _health_response(results, results["status"])


class LivenessView(View):
    """GET /livez/ - the process is serving requests."""

    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):
    """GET /readyz/ - ready once the document database answers."""

    def get(self, request):
        result = health_checker.check("database")
        if result.healthy:
            return JsonResponse({"status": "ready"})
        return JsonResponse({"status": "not_ready", "reason": result.message}, status=503)


class StatusView(View):
    """GET /status/ - version, health summary and document counts."""

    def get(self, request):
        try:
            stats = {
                collection: default_repository.count(collection)
                for collection in (ARTICLES, SUBMISSIONS, EVENTS)
            }
            stats['pending_submissions'] = default_repository.count(
                SUBMISSIONS, [Filter('status', '==', 'pending')]
            )
        except UpstreamError as e:
            logger.warning("Status counts unavailable: %s", e.message)
            stats = None

        health = health_checker.check_all()
        return JsonResponse({
            "application": "Newsroom",
            "version": settings.VERSION,
            "health": health["status"],
            "checks": {name: check["status"] for name, check in health["checks"].items()},
            "stats": stats,
        })


# =============================================================================
# Editor Sessions
# =============================================================================

class EditorLoginView(TokenObtainPairView):
    """
    POST /api/auth/login/ {"username", "password"}
        -> {"access", "refresh", "user": {...}}
    """
    serializer_class = EditorTokenObtainPairSerializer
    permission_classes = [AllowAny]


class EditorTokenRefreshView(TokenRefreshView):
    """POST /api/auth/refresh/ {"refresh"} -> {"access", "refresh"}"""
    permission_classes = [AllowAny]


class CurrentEditorView(APIView):
    """GET /api/auth/me/ - the signed-in editor."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(EditorSerializer(request.user).data)


class EditorLogoutView(APIView):
    """
    POST /api/auth/logout/ {"refresh"}

    Blacklists the refresh token; the access token simply runs out.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError("Refresh token required", field="refresh")

        try:
            RefreshToken(serializer.validated_data['refresh']).blacklist()
        except TokenError as e:
            raise ValidationError(str(e), field="refresh") from e

        logger.info("Editor %s signed out", request.user.pk)
        return Response({"message": "Signed out"})
