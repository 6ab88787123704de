"""
Submission serializers.
"""

from rest_framework import serializers

from apps.articles.text import format_content

from .services import ANONYMOUS_AUTHOR


class SubmissionFormSerializer(serializers.Serializer):
    """
    Public submission form.

    Only coerces types; length rules are checked by validate_submission so
    all field errors come back together. The image may be sent as either
    `image` or `mediaFile`.
    """

    title = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    shortDescription = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    fullArticle = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    authorName = serializers.CharField(required=False, allow_blank=True)
    category = serializers.CharField(required=False, allow_blank=True)
    image = serializers.FileField(required=False, write_only=True)
    mediaFile = serializers.FileField(required=False, write_only=True)


class SubmissionSerializer(serializers.Serializer):
    """Submission document in the editor queue."""

    id = serializers.CharField(read_only=True)
    title = serializers.CharField(read_only=True, default='')
    description = serializers.CharField(read_only=True, default='')
    author = serializers.SerializerMethodField()
    category = serializers.CharField(read_only=True, default='news')
    date = serializers.CharField(read_only=True, default=None)
    slug = serializers.CharField(read_only=True, default='')
    status = serializers.CharField(read_only=True, default='pending')
    imageUrl = serializers.CharField(read_only=True, default='')
    createdAt = serializers.CharField(read_only=True, default=None)

    def get_author(self, obj) -> str:
        return obj.get('author') or ANONYMOUS_AUTHOR


class SubmissionDetailSerializer(SubmissionSerializer):
    """Submission preview: full content plus its rendered HTML."""

    content = serializers.CharField(read_only=True, default='')
    contentHtml = serializers.SerializerMethodField()

    def get_contentHtml(self, obj) -> str:
        return format_content(obj.get('content'))
