"""
Submission API views.

Public:
    POST /api/submissions/                 - Submit an article (throttled)

Editor (IsEditor):
    GET    /api/submissions/?sort=&dir=&toggle=
    GET    /api/submissions/{id}/          - Preview with rendered content
    DELETE /api/submissions/{id}/          - Delete directly
    POST   /api/submissions/{id}/approve/  - Publish as an article
    POST   /api/submissions/{id}/reject/   - Discard with its image
"""

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.articles.search import SortState
from apps.core.exceptions import created_response
from apps.core.permissions import IsEditor
from apps.core.throttling import BurstThrottle, SubmissionThrottle

from .serializers import (
    SubmissionDetailSerializer,
    SubmissionFormSerializer,
    SubmissionSerializer,
)
from .services import SORT_FIELDS, SubmissionService

logger = logging.getLogger(__name__)


class SubmissionServiceMixin:
    """Gives a view its SubmissionService."""

    service_class = SubmissionService

    def get_service(self) -> SubmissionService:
        return self.service_class()


class SubmissionListCreateView(SubmissionServiceMixin, APIView):
    """
    GET  - Editor review queue, newest first by default.
    POST - Public submission form. 201 {id} or 400 {errors: [{field, message}]}.
    """

    throttle_classes = [SubmissionThrottle, BurstThrottle]

    def get_permissions(self):
        if self.request.method == 'POST':
            return [AllowAny()]
        return [IsEditor()]

    def get(self, request):
        params = request.query_params
        sort = SortState.from_params(
            params.get('sort'),
            params.get('dir'),
            SORT_FIELDS,
            toggle=params.get('toggle'),
        )
        submissions = self.get_service().list_submissions(request.user, sort)
        return Response(SubmissionSerializer(submissions, many=True).data)

    def post(self, request):
        serializer = SubmissionFormSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        form = dict(serializer.validated_data)
        image = form.pop('image', None) or form.pop('mediaFile', None)
        form.pop('mediaFile', None)

        submission_id = self.get_service().submit(form, image)
        return created_response({'id': submission_id})


class SubmissionDetailView(SubmissionServiceMixin, APIView):
    permission_classes = [IsEditor]

    def get(self, request, pk):
        submission = self.get_service().get_submission(request.user, pk)
        return Response(SubmissionDetailSerializer(submission).data)

    def delete(self, request, pk):
        self.get_service().delete_submission(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class SubmissionApproveView(SubmissionServiceMixin, APIView):
    """POST -> 200 {articleId}, 404 when the submission is gone."""

    permission_classes = [IsEditor]

    def post(self, request, pk):
        article_id = self.get_service().approve(request.user, pk)
        return Response({'articleId': article_id})


class SubmissionRejectView(SubmissionServiceMixin, APIView):
    """POST -> 204, 404 when the submission is gone."""

    permission_classes = [IsEditor]

    def post(self, request, pk):
        self.get_service().reject(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
