"""
Admin interface for raw document inspection.
"""

from django.contrib import admin
from .models import Document


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    """
    Admin interface for Document model.
    """

    list_display = [
        'collection',
        'doc_id',
        'title',
        'created_at',
        'updated_at',
    ]

    list_filter = ['collection']

    search_fields = ['doc_id']

    readonly_fields = [
        'id',
        'created_at',
        'updated_at',
    ]

    ordering = ['collection', '-created_at']

    def title(self, obj):
        """Title of articles, submissions and events."""
        return (obj.data or {}).get('title', '-')
