"""
Keyword search and sort state for article and event listings.

Search runs in memory over documents already fetched from the repository:
a document matches when ANY whitespace-separated term of the query is a
case-insensitive substring of ANY of the searched fields.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence

from apps.core.exceptions import ValidationError

ARTICLE_SEARCH_FIELDS = ('title', 'description', 'content', 'author')
EVENT_SEARCH_FIELDS = ('title', 'description', 'location', 'organizer')

SORT_DIRECTIONS = ('asc', 'desc')


def search_terms(query: Optional[str]) -> List[str]:
    """Lowercased, non-empty whitespace-separated terms of a query."""
    if not query:
        return []
    return [term for term in query.lower().split() if term]


def matches(document: Dict[str, Any], terms: Sequence[str], fields: Iterable[str]) -> bool:
    """True when any term occurs in any of the document's fields."""
    haystacks = [str(document.get(name) or '').lower() for name in fields]
    return any(term in haystack for term in terms for haystack in haystacks)


def filter_documents(
    documents: Iterable[Dict[str, Any]],
    query: Optional[str],
    fields: Iterable[str] = ARTICLE_SEARCH_FIELDS,
) -> List[Dict[str, Any]]:
    """
    Keep documents matching `query`, preserving order.

    A blank query keeps everything (listing filter semantics).
    """
    documents = list(documents)
    terms = search_terms(query)
    if not terms:
        return documents
    fields = tuple(fields)
    return [document for document in documents if matches(document, terms, fields)]


def search_documents(
    documents: Iterable[Dict[str, Any]],
    query: Optional[str],
    fields: Iterable[str] = ARTICLE_SEARCH_FIELDS,
) -> List[Dict[str, Any]]:
    """
    Search page semantics: a blank query finds nothing.
    """
    if not search_terms(query):
        return []
    return filter_documents(documents, query, fields)


@dataclass(frozen=True)
class SortState:
    """
    Single-field sort of a listing.

    Selecting the current field again flips the direction; selecting a
    different field starts it descending.
    """
    field: str = 'date'
    direction: str = 'desc'

    def toggle(self, field: str) -> 'SortState':
        if field == self.field:
            return replace(self, direction='asc' if self.direction == 'desc' else 'desc')
        return SortState(field=field, direction='desc')

    @classmethod
    def from_params(
        cls,
        field: Optional[str],
        direction: Optional[str],
        allowed: Sequence[str],
        default: Optional['SortState'] = None,
        toggle: Optional[str] = None,
    ) -> 'SortState':
        """
        Build a sort state from request parameters.

        Raises:
            ValidationError: unknown sort field or direction
        """
        default = default or cls(field=allowed[0])
        state = cls(field=field or default.field, direction=direction or default.direction)

        if toggle:
            state = state.toggle(toggle)

        if state.field not in allowed:
            raise ValidationError(
                f"Cannot sort by '{state.field}', choose one of: {', '.join(allowed)}",
                field='sort',
            )
        if state.direction not in SORT_DIRECTIONS:
            raise ValidationError("Sort direction must be 'asc' or 'desc'", field='dir')
        return state
