"""
Tests for the document repository.

Tests cover:
- create / get / update / set / delete semantics
- Equality filters, ordering and counts
- Cursor pagination, including a cursor document deleted between pages
- Database failures surfacing as UpstreamError
"""

import pytest
from unittest.mock import patch
from django.db import DatabaseError

from apps.core.documents import (
    ARTICLES,
    EVENTS,
    Filter,
    OrderBy,
    Query,
    default_repository as repo,
    server_timestamp,
)
from apps.core.exceptions import NotFoundError, UpstreamError


def seed(count=5):
    """Articles dated 2025-01-01 .. 2025-01-0N, returned oldest first."""
    return [
        repo.create(ARTICLES, {'title': f'Story {n}', 'date': f'2025-01-0{n}', 'category': 'news' if n % 2 else 'sports'})
        for n in range(1, count + 1)
    ]


# ============================================================================
# CRUD Tests
# ============================================================================

@pytest.mark.django_db
class TestCrud:
    """Test single-document operations."""

    def test_create_and_get(self):
        doc_id = repo.create(ARTICLES, {'title': 'Hello', 'id': 'ignored'})

        assert repo.get(ARTICLES, doc_id) == {'id': doc_id, 'title': 'Hello'}

    def test_get_missing(self):
        assert repo.get(ARTICLES, 'nope') is None

    def test_collections_are_separate(self):
        doc_id = repo.create(ARTICLES, {'title': 'Hello'})

        assert repo.get(EVENTS, doc_id) is None

    def test_update_merges(self):
        doc_id = repo.create(ARTICLES, {'title': 'Hello', 'status': 'draft'})

        repo.update(ARTICLES, doc_id, {'status': 'published'})

        assert repo.get(ARTICLES, doc_id) == {'id': doc_id, 'title': 'Hello', 'status': 'published'}

    def test_update_missing(self):
        with pytest.raises(NotFoundError) as exc_info:
            repo.update(ARTICLES, 'nope', {'status': 'published'})

        assert exc_info.value.collection == ARTICLES

    def test_set_overwrites(self):
        repo.set('settings', 'countdown', {'title': 'A', 'enabled': True})
        repo.set('settings', 'countdown', {'title': 'B'})

        assert repo.get('settings', 'countdown') == {'id': 'countdown', 'title': 'B'}

    def test_delete_and_delete_missing(self):
        doc_id = repo.create(ARTICLES, {'title': 'Hello'})

        repo.delete(ARTICLES, doc_id)
        repo.delete(ARTICLES, doc_id)

        assert repo.get(ARTICLES, doc_id) is None

    def test_database_error_is_upstream(self):
        with patch('apps.core.models.Document.objects.create', side_effect=DatabaseError('locked')):
            with pytest.raises(UpstreamError) as exc_info:
                repo.create(ARTICLES, {'title': 'Hello'})

        assert exc_info.value.status_code == 502


# ============================================================================
# Query Tests
# ============================================================================

@pytest.mark.django_db
class TestQuery:
    """Test filters, ordering and counts."""

    def test_ordered_desc(self):
        seed()

        titles = [d['title'] for d in repo.query(ARTICLES, Query().ordered('date', 'desc'))]

        assert titles == ['Story 5', 'Story 4', 'Story 3', 'Story 2', 'Story 1']

    def test_filter_and_limit(self):
        seed()

        query = Query().where('category', '==', 'news').ordered('date', 'asc').limited(2)

        assert [d['title'] for d in repo.query(ARTICLES, query)] == ['Story 1', 'Story 3']

    def test_count(self):
        seed()

        assert repo.count(ARTICLES) == 5
        assert repo.count(ARTICLES, [Filter('category', '==', 'sports')]) == 2
        assert repo.count(EVENTS) == 0

    def test_unsupported_operator(self):
        with pytest.raises(ValueError):
            Filter('date', '>', '2025-01-01')
        with pytest.raises(ValueError):
            OrderBy('date', 'sideways')


@pytest.mark.django_db
class TestCursor:
    """Test start-after pagination."""

    def test_pages(self):
        seed()
        query = Query().ordered('date', 'desc').limited(2)

        first = repo.query(ARTICLES, query)
        second = repo.query(ARTICLES, query.after(first[-1]))
        third = repo.query(ARTICLES, query.after(second[-1]['id']))

        assert [d['title'] for d in first] == ['Story 5', 'Story 4']
        assert [d['title'] for d in second] == ['Story 3', 'Story 2']
        assert [d['title'] for d in third] == ['Story 1']

    def test_deleted_cursor_resumes_after_sort_key(self):
        seed()
        query = Query().ordered('date', 'desc').limited(2)
        first = repo.query(ARTICLES, query)
        repo.delete(ARTICLES, first[-1]['id'])

        second = repo.query(ARTICLES, query.after(first[-1]))

        assert [d['title'] for d in second] == ['Story 3', 'Story 2']

    def test_sort_key_cursor_without_document(self):
        ids = seed()
        query = Query().ordered('date', 'desc').limited(2)
        repo.delete(ARTICLES, ids[3])

        page = repo.query(ARTICLES, query.after({'id': ids[3], 'date': '2025-01-04'}))

        assert [d['title'] for d in page] == ['Story 3', 'Story 2']

    def test_ascending_cursor_by_id(self):
        ids = seed()
        query = Query().ordered('date', 'asc').limited(2)

        page = repo.query(ARTICLES, query.after(ids[1]))

        assert [d['title'] for d in page] == ['Story 3', 'Story 4']

    def test_creation_order_cursor(self):
        ids = seed(3)

        page = repo.query(ARTICLES, Query().after(ids[0]))

        assert [d['id'] for d in page] == ids[1:]

    def test_unknown_cursor_id_gives_empty_page(self):
        seed()

        assert repo.query(ARTICLES, Query().ordered('date').after('missing')) == []


class TestServerTimestamp:
    def test_utc_millis(self):
        value = server_timestamp()

        assert value.endswith('Z')
        assert len(value.split('.')[-1]) == 4
