"""
Article API views.

Editor endpoints (IsEditor):
    GET    /api/articles/                 - List with category/status filters, sort and search
    POST   /api/articles/                 - Create (multipart when an image is attached)
    GET    /api/articles/{id}/            - Detail
    PATCH  /api/articles/{id}/            - Partial update
    DELETE /api/articles/{id}/            - Delete article and its image
    DELETE /api/articles/{id}/image/      - Remove the image only
    POST   /api/articles/preview/         - Render content as HTML
    GET    /api/dashboard/                - Editor dashboard stats

Public endpoints (published articles only):
    GET /api/articles/feed/?category=&cursor=
    GET /api/articles/search/?q=
    GET /api/articles/by-slug/{category}/{slug}/
"""

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.exceptions import created_response
from apps.core.permissions import IsEditor
from apps.core.throttling import BurstThrottle

from .search import SortState
from .serializers import (
    ArticleDetailSerializer,
    ArticleInputSerializer,
    ArticleSerializer,
    DashboardSerializer,
    FeedSerializer,
    PreviewSerializer,
)
from .services import SORT_FIELDS, ArticleService
from .text import format_content

logger = logging.getLogger(__name__)


def _form_fields(request):
    """Validated editor form fields and the optional image upload."""
    serializer = ArticleInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    fields = dict(serializer.validated_data)
    image = fields.pop('image', None)
    return fields, image


class ArticleServiceMixin:
    """Gives a view its ArticleService."""

    service_class = ArticleService

    def get_service(self) -> ArticleService:
        return self.service_class()


# ============================================================================
# Editor
# ============================================================================

class ArticleListCreateView(ArticleServiceMixin, APIView):
    """
    GET  - Editor listing.

    Query params:
        category: news | forum | sports | ae | all
        status:   published | draft | all
        sort:     date | title | createdAt (default date)
        dir:      asc | desc (default desc)
        toggle:   field to toggle the current sort on
        search:   keywords matched against title, description, content, author

    POST - Create an article.
    """

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
        articles = self.get_service().list_articles(
            request.user,
            category=params.get('category'),
            status=params.get('status'),
            sort=sort,
            search=params.get('search'),
        )
        return Response(ArticleSerializer(articles, many=True).data)

    def post(self, request):
        fields, image = _form_fields(request)
        article = self.get_service().create_article(request.user, fields, image)
        return created_response(ArticleDetailSerializer(article).data)


class ArticleDetailView(ArticleServiceMixin, APIView):
    """GET / PATCH / DELETE one article."""

    permission_classes = [IsEditor]
    throttle_classes = [BurstThrottle]

    def get(self, request, pk):
        article = self.get_service().get_article(request.user, pk)
        return Response(ArticleDetailSerializer(article).data)

    def patch(self, request, pk):
        fields, image = _form_fields(request)
        article = self.get_service().update_article(request.user, pk, fields, image)
        return Response(ArticleDetailSerializer(article).data)

    def delete(self, request, pk):
        self.get_service().delete_article(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ArticleImageView(ArticleServiceMixin, APIView):
    """DELETE the article's image and clear its imageUrl."""

    permission_classes = [IsEditor]

    def delete(self, request, pk):
        article = self.get_service().remove_image(request.user, pk)
        return Response(ArticleDetailSerializer(article).data)


class ArticlePreviewView(APIView):
    """
    POST {content} -> {html}

    Renders plain text the way the public article page shows it.
    """

    permission_classes = [IsEditor]

    def post(self, request):
        serializer = PreviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response({'html': format_content(serializer.validated_data['content'])})


class DashboardView(ArticleServiceMixin, APIView):
    """Totals and the most recent articles for the editor landing page."""

    permission_classes = [IsEditor]

    def get(self, request):
        stats = self.get_service().dashboard(request.user)
        return Response(DashboardSerializer(stats).data)


# ============================================================================
# Public
# ============================================================================

class ArticleFeedView(ArticleServiceMixin, APIView):
    """
    GET /api/articles/feed/?category=news&cursor=<token>

    First page (no cursor) carries the featured article separately.
    Unknown categories fall back to news.
    """

    permission_classes = [AllowAny]
    throttle_classes = [BurstThrottle]

    def get(self, request):
        page = self.get_service().feed(
            request.query_params.get('category'),
            cursor=request.query_params.get('cursor') or None,
        )
        return Response(FeedSerializer(page).data)


class ArticleSearchView(ArticleServiceMixin, APIView):
    """GET /api/articles/search/?q=<keywords>"""

    permission_classes = [AllowAny]
    throttle_classes = [BurstThrottle]

    def get(self, request):
        query = request.query_params.get('q', '')
        results = self.get_service().search(query)
        return Response({
            'query': query,
            'count': len(results),
            'results': ArticleSerializer(results, many=True).data,
        })


class ArticleBySlugView(ArticleServiceMixin, APIView):
    """GET /api/articles/by-slug/<category>/<slug>/"""

    permission_classes = [AllowAny]
    throttle_classes = [BurstThrottle]

    def get(self, request, category, slug):
        article = self.get_service().get_by_slug(category, slug)
        return Response(ArticleDetailSerializer(article).data)
