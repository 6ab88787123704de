"""
Document repository for the Newsroom.

Articles, submissions, events and the settings singletons are schemaless
documents grouped into collections. Workflows talk to the abstract
DocumentRepository; DjangoDocumentRepository stores every document as one
row of the `documents` table with its fields in a JSON column.

Query model:
- Filter: equality predicate on one top-level field
- OrderBy: one field, ascending or descending (ties broken by document id)
- limit / start_after: keyset pagination, resuming after a document or its sort key
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Union

from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.exceptions import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)


# Collection names
ARTICLES = 'articles'
SUBMISSIONS = 'submissions'
EVENTS = 'events'
SETTINGS = 'settings'


def server_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return timezone.now().isoformat(timespec='milliseconds').replace('+00:00', 'Z')


# =============================================================================
# Query Model
# =============================================================================

@dataclass(frozen=True)
class Filter:
    """Predicate on one document field."""
    field: str
    op: str
    value: Any

    SUPPORTED_OPS = ('==',)

    def __post_init__(self):
        if self.op not in self.SUPPORTED_OPS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class OrderBy:
    """Single-field ordering."""
    field: str
    direction: str = 'desc'

    def __post_init__(self):
        if self.direction not in ('asc', 'desc'):
            raise ValueError(f"Unsupported sort direction: {self.direction}")

    @property
    def descending(self) -> bool:
        return self.direction == 'desc'


@dataclass
class Query:
    """Filters, ordering and an optional page window over one collection."""
    filters: List[Filter] = field(default_factory=list)
    order_by: Optional[OrderBy] = None
    limit: Optional[int] = None
    start_after: Optional[Union[Dict[str, Any], str]] = None

    def where(self, field_name: str, op: str, value: Any) -> 'Query':
        return replace(self, filters=[*self.filters, Filter(field_name, op, value)])

    def ordered(self, field_name: str, direction: str = 'desc') -> 'Query':
        return replace(self, order_by=OrderBy(field_name, direction))

    def limited(self, limit: Optional[int]) -> 'Query':
        return replace(self, limit=limit)

    def after(self, cursor: Optional[Union[Dict[str, Any], str]]) -> 'Query':
        return replace(self, start_after=cursor)

    @property
    def cursor_id(self) -> Optional[str]:
        if self.start_after is None:
            return None
        if isinstance(self.start_after, dict):
            return self.start_after.get('id')
        return str(self.start_after)


# =============================================================================
# Interface
# =============================================================================

class DocumentRepository(ABC):
    """
    Typed CRUD and queries over document collections.

    Documents are plain dicts; the document id is returned under `id`
    and is never stored inside the document body.
    """

    @abstractmethod
    def create(self, collection: str, data: Dict[str, Any]) -> str:
        """Store a new document and return its generated id."""
        pass

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one document, or None when it does not exist."""
        pass

    @abstractmethod
    def update(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> None:
        """
        Merge `partial` into an existing document.

        Raises:
            NotFoundError: if the document does not exist
        """
        pass

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Overwrite (or create) the document stored under a fixed id."""
        pass

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        """Remove a document. Deleting a missing document is a no-op."""
        pass

    @abstractmethod
    def query(self, collection: str, query: Optional[Query] = None) -> List[Dict[str, Any]]:
        """Run a query and return matching documents in order."""
        pass

    @abstractmethod
    def count(self, collection: str, filters: Optional[List[Filter]] = None) -> int:
        """Count documents matching all filters."""
        pass


# =============================================================================
# Django Implementation
# =============================================================================

def _body(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key != 'id'}


class DjangoDocumentRepository(DocumentRepository):
    """DocumentRepository backed by the `documents` table."""

    def _documents(self, collection: str, filters: Optional[List[Filter]] = None):
        from apps.core.models import Document

        queryset = Document.objects.filter(collection=collection)
        for predicate in filters or []:
            queryset = queryset.filter(**{f"data__{predicate.field}": predicate.value})
        return queryset

    def create(self, collection: str, data: Dict[str, Any]) -> str:
        from apps.core.models import Document

        try:
            document = Document.objects.create(collection=collection, data=_body(data))
        except DatabaseError as e:
            logger.error("Failed to create %s document: %s", collection, e)
            raise UpstreamError(operation=f"create {collection} document") from e

        logger.debug("Created %s/%s", collection, document.doc_id)
        return document.doc_id

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            document = self._documents(collection).filter(doc_id=doc_id).first()
        except DatabaseError as e:
            logger.error("Failed to load %s/%s: %s", collection, doc_id, e)
            raise UpstreamError(operation=f"load {collection} document") from e
        return document.to_dict() if document else None

    def update(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> None:
        try:
            with transaction.atomic():
                document = (
                    self._documents(collection)
                    .select_for_update()
                    .filter(doc_id=doc_id)
                    .first()
                )
                if document is None:
                    raise NotFoundError(collection, doc_id)
                document.data = {**(document.data or {}), **_body(partial)}
                document.save(update_fields=['data', 'updated_at'])
        except DatabaseError as e:
            logger.error("Failed to update %s/%s: %s", collection, doc_id, e)
            raise UpstreamError(operation=f"update {collection} document") from e

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        from apps.core.models import Document

        try:
            Document.objects.update_or_create(
                collection=collection,
                doc_id=doc_id,
                defaults={'data': _body(data)},
            )
        except DatabaseError as e:
            logger.error("Failed to write %s/%s: %s", collection, doc_id, e)
            raise UpstreamError(operation=f"save {collection} document") from e

    def delete(self, collection: str, doc_id: str) -> None:
        try:
            deleted, _ = self._documents(collection).filter(doc_id=doc_id).delete()
        except DatabaseError as e:
            logger.error("Failed to delete %s/%s: %s", collection, doc_id, e)
            raise UpstreamError(operation=f"delete {collection} document") from e

        if not deleted:
            logger.debug("Delete of missing %s/%s ignored", collection, doc_id)

    def query(self, collection: str, query: Optional[Query] = None) -> List[Dict[str, Any]]:
        query = query or Query()
        try:
            queryset = self._documents(collection, query.filters)
            if query.start_after is not None:
                queryset = self._after_cursor(collection, queryset, query)
                if queryset is None:
                    return []

            if query.order_by:
                prefix = '-' if query.order_by.descending else ''
                queryset = queryset.order_by(
                    f"{prefix}data__{query.order_by.field}",
                    f"{prefix}doc_id",
                )
            else:
                queryset = queryset.order_by('created_at', 'doc_id')

            if query.limit is not None:
                queryset = queryset[:query.limit]
            documents = [document.to_dict() for document in queryset]
        except DatabaseError as e:
            logger.error("Failed to query %s: %s", collection, e)
            raise UpstreamError(operation=f"query {collection}") from e

        return documents

    def count(self, collection: str, filters: Optional[List[Filter]] = None) -> int:
        try:
            return self._documents(collection, filters).count()
        except DatabaseError as e:
            logger.error("Failed to count %s: %s", collection, e)
            raise UpstreamError(operation=f"count {collection}") from e

    def _after_cursor(self, collection: str, queryset, query: Query):
        """
        Keyset filter for everything strictly after the cursor.

        A dict cursor carrying the sort field is used as is, so a cursor
        document deleted between pages still resumes after its
        `(field, id)` key. A bare id is looked up first; returns None when
        it names no document.
        """
        cursor_id = query.cursor_id
        order_by = query.order_by
        cursor = query.start_after if isinstance(query.start_after, dict) else {}

        if order_by is None:
            anchor = self._documents(collection).filter(doc_id=cursor_id).values('created_at').first()
            if anchor is None:
                logger.warning("Cursor %s not found, returning empty page", cursor_id)
                return None
            return queryset.filter(
                Q(created_at__gt=anchor['created_at'])
                | Q(created_at=anchor['created_at'], doc_id__gt=cursor_id)
            )

        value = cursor.get(order_by.field)
        if value is None:
            anchor = self._documents(collection).filter(doc_id=cursor_id).first()
            if anchor is None:
                logger.warning("Cursor %s not found, returning empty page", cursor_id)
                return None
            value = (anchor.data or {}).get(order_by.field)
            if value is None:
                logger.warning("Cursor %s has no %s, returning empty page", cursor_id, order_by.field)
                return None

        lookup = 'lt' if order_by.descending else 'gt'
        return queryset.filter(
            Q(**{f"data__{order_by.field}__{lookup}": value})
            | Q(**{f"data__{order_by.field}": value, f"doc_id__{lookup}": cursor_id})
        )


# Global repository instance
default_repository = DjangoDocumentRepository()
