"""
Health probes (mounted at the site root) and editor session endpoints
(mounted at /api/auth/ in config/urls.py).
"""

from django.urls import path
from .views import (
    CurrentEditorView,
    EditorLoginView,
    EditorLogoutView,
    EditorTokenRefreshView,
    HealthCheckView,
    LivenessView,
    ReadinessView,
    StatusView,
)

app_name = 'core'

urlpatterns = [
    path('health/', HealthCheckView.as_view(), name='health'),
    path('health/<str:check_name>/', HealthCheckView.as_view(), name='health-check'),
    path('livez/', LivenessView.as_view(), name='liveness'),
    path('readyz/', ReadinessView.as_view(), name='readiness'),
    path('status/', StatusView.as_view(), name='status'),
]

auth_urlpatterns = [
    path('login/', EditorLoginView.as_view(), name='login'),
    path('refresh/', EditorTokenRefreshView.as_view(), name='refresh'),
    path('me/', CurrentEditorView.as_view(), name='me'),
    path('logout/', EditorLogoutView.as_view(), name='logout'),
]
