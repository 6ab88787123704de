"""
Submission API URLs.
"""

from django.urls import path
from .views import (
    SubmissionApproveView,
    SubmissionDetailView,
    SubmissionListCreateView,
    SubmissionRejectView,
)

app_name = 'submissions'

urlpatterns = [
    path('', SubmissionListCreateView.as_view(), name='submission-list'),
    path('<str:pk>/', SubmissionDetailView.as_view(), name='submission-detail'),
    path('<str:pk>/approve/', SubmissionApproveView.as_view(), name='submission-approve'),
    path('<str:pk>/reject/', SubmissionRejectView.as_view(), name='submission-reject'),
]
