"""
Core models for the Newsroom project.
Base classes and the generic document table backing the document repository.
"""

import uuid
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone


def generate_doc_id():
    """Random, URL-safe document identifier."""
    return uuid.uuid4().hex


class BaseModel(models.Model):
    """
    Abstract base model with common fields for all Newsroom models.
    Provides UUID primary key and timestamp tracking.
    """
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name='ID',
        help_text='Unique identifier (UUID)'
    )

    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        verbose_name='Created At',
        help_text='Timestamp when record was created'
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Updated At',
        help_text='Timestamp when record was last updated'
    )

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.__class__.__name__} ({self.id})"


class Document(BaseModel):
    """
    One schemaless document in a named collection.

    Articles, submissions, events and the settings singletons all live here;
    their shape is owned by the app that writes them, not by the table.
    """

    collection = models.CharField(
        max_length=64,
        db_index=True,
        verbose_name='Collection',
        help_text='Collection name, e.g. articles or events'
    )

    doc_id = models.CharField(
        max_length=64,
        default=generate_doc_id,
        verbose_name='Document ID',
        help_text='Identifier of the document within its collection'
    )

    data = models.JSONField(
        default=dict,
        blank=True,
        encoder=DjangoJSONEncoder,
        verbose_name='Data',
        help_text='Document fields'
    )

    class Meta:
        db_table = 'documents'
        verbose_name = 'Document'
        verbose_name_plural = 'Documents'
        ordering = ['collection', 'created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['collection', 'doc_id'],
                name='unique_document_per_collection',
            ),
        ]

    def __str__(self):
        return f"{self.collection}/{self.doc_id}"

    def to_dict(self):
        """Document fields with the id folded in."""
        return {'id': self.doc_id, **(self.data or {})}
