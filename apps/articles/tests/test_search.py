"""
Tests for keyword search and sort toggling.

Tests cover:
- Any-term / any-field matching, case-insensitive
- Blank query semantics for listings vs the search page
- Event field set
- Sort toggle and parameter validation
"""

import pytest

from apps.articles.search import (
    EVENT_SEARCH_FIELDS,
    SortState,
    filter_documents,
    search_documents,
    search_terms,
)
from apps.core.exceptions import ValidationError


@pytest.fixture
def articles():
    return [
        {'id': '1', 'title': 'Football Finals', 'description': 'Big game', 'content': '', 'author': 'Ana'},
        {'id': '2', 'title': 'Spring Play', 'description': 'Drama club', 'content': 'Tickets on sale', 'author': 'Ben'},
        {'id': '3', 'title': 'Budget Vote', 'description': 'Council', 'content': 'The FOOTBALL field', 'author': None},
        {'id': '4', 'title': 'Chess', 'description': 'Club news', 'content': 'Openings', 'author': 'Cara Drama'},
    ]


# ============================================================================
# Search Tests
# ============================================================================

class TestSearch:
    """Test keyword matching over documents."""

    def test_terms_split_and_lowercased(self):
        assert search_terms("  Foo   BAR ") == ["foo", "bar"]
        assert search_terms("") == []
        assert search_terms(None) == []

    def test_single_term_matches_any_field(self, articles):
        found = search_documents(articles, "football")

        assert [a['id'] for a in found] == ['1', '3']

    def test_any_term_matches(self, articles):
        found = search_documents(articles, "chess tickets")

        assert [a['id'] for a in found] == ['2', '4']

    def test_author_is_searched(self, articles):
        assert [a['id'] for a in search_documents(articles, "drama")] == ['2', '4']

    def test_substring_match(self, articles):
        assert [a['id'] for a in search_documents(articles, "udg")] == ['3']

    def test_no_match(self, articles):
        assert search_documents(articles, "volleyball") == []

    def test_blank_query_finds_nothing_on_search_page(self, articles):
        assert search_documents(articles, "   ") == []

    def test_blank_query_keeps_everything_in_listings(self, articles):
        assert filter_documents(articles, "") == articles

    @pytest.mark.parametrize("token", ["foot", "DRAMA", "club", "ana", "sale"])
    def test_single_token_result_set(self, articles, token):
        fields = ('title', 'description', 'content', 'author')
        expected = [
            a for a in articles
            if any(token.lower() in str(a.get(f) or '').lower() for f in fields)
        ]

        assert search_documents(articles, token) == expected

    def test_event_fields(self):
        events = [
            {'id': 'e1', 'title': 'Fair', 'location': 'Gym', 'organizer': 'PTA', 'description': ''},
            {'id': 'e2', 'title': 'Concert', 'location': 'Hall', 'organizer': 'Band', 'description': ''},
        ]

        assert [e['id'] for e in search_documents(events, "gym", EVENT_SEARCH_FIELDS)] == ['e1']
        assert [e['id'] for e in search_documents(events, "band", EVENT_SEARCH_FIELDS)] == ['e2']


# ============================================================================
# Sort Tests
# ============================================================================

class TestSortState:
    """Test single-field sort toggling."""

    def test_same_field_flips_direction(self):
        state = SortState('date', 'desc')

        assert state.toggle('date') == SortState('date', 'asc')
        assert state.toggle('date').toggle('date') == SortState('date', 'desc')

    def test_new_field_starts_descending(self):
        assert SortState('date', 'asc').toggle('title') == SortState('title', 'desc')

    def test_from_params_defaults(self):
        assert SortState.from_params(None, None, ('date', 'title')) == SortState('date', 'desc')

    def test_from_params_with_toggle(self):
        state = SortState.from_params('title', 'desc', ('date', 'title'), toggle='title')

        assert state == SortState('title', 'asc')

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            SortState.from_params('views', None, ('date', 'title'))

        assert exc_info.value.field == 'sort'

    def test_unknown_direction_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            SortState.from_params('date', 'sideways', ('date', 'title'))

        assert exc_info.value.field == 'dir'
