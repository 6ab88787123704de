"""
Article serializers.

Articles are documents, not models: output serializers describe the
document shape, input serializers only coerce request data. Field-level
rules (required fields, slug uniqueness, image cap) live in ArticleService
so every error of a form is reported at once.
"""

from rest_framework import serializers

from .text import format_content


# ============================================================================
# Output
# ============================================================================

class ArticleSerializer(serializers.Serializer):
    """Article document as returned by listings."""

    id = serializers.CharField(read_only=True)
    title = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True, default='')
    content = serializers.CharField(read_only=True, default='')
    author = serializers.CharField(read_only=True, default='')
    category = serializers.CharField(read_only=True)
    date = serializers.CharField(read_only=True, default='')
    slug = serializers.CharField(read_only=True, default='')
    status = serializers.CharField(read_only=True)
    imageUrl = serializers.CharField(read_only=True, default='')
    createdAt = serializers.CharField(read_only=True, default=None)
    updatedAt = serializers.CharField(read_only=True, default=None)


class ArticleDetailSerializer(ArticleSerializer):
    """Single article, with its content rendered as HTML paragraphs."""

    contentHtml = serializers.SerializerMethodField()

    def get_contentHtml(self, obj) -> str:
        return format_content(obj.get('content'))


# ============================================================================
# Input
# ============================================================================

class ArticleInputSerializer(serializers.Serializer):
    """
    Editor form fields.

    Every field is optional here; PATCH sends only what changed and POST is
    validated as a whole by the service.
    """

    title = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    content = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    author = serializers.CharField(required=False, allow_blank=True)
    category = serializers.CharField(required=False, allow_blank=True)
    date = serializers.CharField(required=False, allow_blank=True)
    slug = serializers.CharField(required=False, allow_blank=True)
    status = serializers.CharField(required=False, allow_blank=True)
    image = serializers.FileField(required=False, allow_empty_file=False, write_only=True)


class PreviewSerializer(serializers.Serializer):
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)


class FeedSerializer(serializers.Serializer):
    """One "load more" page of a category."""

    category = serializers.CharField()
    display = serializers.CharField()
    featured = ArticleSerializer(allow_null=True)
    articles = ArticleSerializer(many=True)
    cursor = serializers.CharField(allow_null=True)
    has_more = serializers.BooleanField()


class DashboardSerializer(serializers.Serializer):
    articles = serializers.IntegerField()
    upcoming_events = serializers.IntegerField()
    submissions = serializers.IntegerField()
    recent_articles = ArticleSerializer(many=True)
