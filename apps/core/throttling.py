"""
Rate Limiting / Throttling for the Newsroom.

Custom DRF throttle classes for different endpoint types.

Usage in views:
    from apps.core.throttling import SubmissionThrottle

    class SubmissionListCreateView(APIView):
        throttle_classes = [SubmissionThrottle]

Usage in settings:
    REST_FRAMEWORK = {
        'DEFAULT_THROTTLE_RATES': {
            'submission': '10/hour',   # public submission form
            'burst': '120/minute',     # public read endpoints
        }
    }
"""

from rest_framework.throttling import AnonRateThrottle, SimpleRateThrottle
import logging

logger = logging.getLogger(__name__)


class SubmissionThrottle(AnonRateThrottle):
    """
    Throttle for the public submission form.

    Applies to:
    - POST /api/submissions/

    Keyed by client IP for anonymous readers; signed-in editors are exempt.

    Default: 10 requests/hour
    """
    scope = 'submission'

    def get_rate(self):
        """Get rate from settings or use default."""
        try:
            return super().get_rate()
        except Exception:
            return '10/hour'

    def allow_request(self, request, view):
        # Only the create action is rate limited
        if request.method != 'POST':
            return True
        allowed = super().allow_request(request, view)
        if not allowed:
            logger.warning("Submission rate limit hit for %s", self.get_ident(request))
        return allowed


class BurstThrottle(SimpleRateThrottle):
    """
    Burst throttle for the public read endpoints.

    Keyed by user id when signed in, by client IP otherwise.

    Default: 120 requests/minute
    """
    scope = 'burst'

    def get_rate(self):
        try:
            return super().get_rate()
        except Exception:
            return '120/minute'

    def get_cache_key(self, request, view):
        if request.user and request.user.is_authenticated:
            ident = request.user.pk
        else:
            ident = self.get_ident(request)
        return self.cache_format % {'scope': self.scope, 'ident': ident}
