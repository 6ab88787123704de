"""
Article services: editor CRUD, public listings, search and dashboard stats.

Editor operations take the acting user first and check it with
`require_authenticated`; public reads only ever return published articles.
Multi-step writes that touch the media store run as sagas.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from django.conf import settings
from django.utils.dateparse import parse_date, parse_datetime

from apps.core.documents import (
    ARTICLES,
    EVENTS,
    SUBMISSIONS,
    Filter,
    Query,
    default_repository,
    server_timestamp,
)
from apps.core.exceptions import FormValidationError, NotFoundError, ValidationError
from apps.core.permissions import require_authenticated
from apps.core.saga import Saga
from apps.media.storage import ARTICLES_NAMESPACE, build_key, default_media_store
from apps.media.validators import editor_image_limit, validate_image
from .search import ARTICLE_SEARCH_FIELDS, SortState, filter_documents, search_documents
from .text import generate_slug

logger = logging.getLogger(__name__)


CATEGORIES = {
    'news': 'News',
    'forum': 'Forum',
    'sports': 'Sports',
    'ae': 'Arts & Entertainment',
}
DEFAULT_CATEGORY = 'news'

STATUS_PUBLISHED = 'published'
STATUS_DRAFT = 'draft'
STATUSES = (STATUS_PUBLISHED, STATUS_DRAFT)

SORT_FIELDS = ('date', 'title', 'createdAt')

EDITABLE_FIELDS = (
    'title', 'description', 'content', 'author', 'category',
    'date', 'slug', 'status', 'imageUrl',
)

RECENT_ARTICLES_LIMIT = 5


def resolve_category(category: Optional[str]) -> str:
    """Known category slug, falling back to news for anything else."""
    return category if category in CATEGORIES else DEFAULT_CATEGORY


def encode_feed_cursor(article: Optional[Dict[str, Any]]) -> Optional[str]:
    """Opaque "load more" token `<date>|<id>` for the last article of a page."""
    if not article:
        return None
    if not article.get('date'):
        return article['id']
    return f"{article['date']}|{article['id']}"


def decode_feed_cursor(token: str) -> Union[Dict[str, Any], str]:
    """Cursor for Query.after(); a token without a date is a bare id."""
    date, _, doc_id = token.rpartition('|')
    if not date:
        return doc_id
    return {'id': doc_id, 'date': date}


def is_valid_date(value: Any) -> bool:
    if not value or not isinstance(value, str):
        return False
    try:
        return bool(parse_date(value) or parse_datetime(value))
    except ValueError:
        return False


def unique_slug(repository, category: str, slug: str, exclude_id: Optional[str] = None) -> str:
    """
    `slug`, or `slug-2`, `slug-3`... when the category already uses it.
    """
    candidate = slug
    suffix = 2
    while True:
        query = Query().where('category', '==', category).where('slug', '==', candidate)
        clashes = [doc for doc in repository.query(ARTICLES, query) if doc['id'] != exclude_id]
        if not clashes:
            return candidate
        candidate = f"{slug}-{suffix}"
        suffix += 1


class ArticleService:
    """Article reads and writes over the document repository and media store."""

    def __init__(self, repository=None, media=None):
        self.repository = repository or default_repository
        self.media = media or default_media_store

    # =========================================================================
    # Editor: reads
    # =========================================================================

    def get_article(self, user, article_id: str) -> Dict[str, Any]:
        require_authenticated(user)
        article = self.repository.get(ARTICLES, article_id)
        if article is None:
            raise NotFoundError(ARTICLES, article_id)
        return article

    def list_articles(
        self,
        user,
        category: Optional[str] = None,
        status: Optional[str] = None,
        sort: Optional[SortState] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Editor listing: equality filters and ordering run in the repository,
        the keyword search runs over the fetched page.
        """
        require_authenticated(user)
        sort = sort or SortState('date', 'desc')

        query = Query().ordered(sort.field, sort.direction)
        if category and category != 'all':
            query = query.where('category', '==', category)
        if status and status != 'all':
            query = query.where('status', '==', status)

        return filter_documents(self.repository.query(ARTICLES, query), search, ARTICLE_SEARCH_FIELDS)

    # =========================================================================
    # Editor: writes
    # =========================================================================

    def validate(self, data: Dict[str, Any], image=None, exclude_id: Optional[str] = None) -> List[ValidationError]:
        """Collect every field error of an article form, in form order."""
        errors = []

        for name, label in (('title', 'Title'), ('description', 'Description'), ('content', 'Content')):
            if not str(data.get(name) or '').strip():
                errors.append(ValidationError(f"{label} is required", field=name))

        if not str(data.get('slug') or '').strip():
            errors.append(ValidationError("Slug is required", field='slug'))
        elif data.get('category') in CATEGORIES:
            taken = unique_slug(self.repository, data['category'], data['slug'], exclude_id) != data['slug']
            if taken:
                errors.append(ValidationError(
                    "Another article in this category already uses this slug", field='slug',
                ))

        if not data.get('date'):
            errors.append(ValidationError("Date is required", field='date'))
        elif not is_valid_date(data['date']):
            errors.append(ValidationError("Date must be an ISO date (YYYY-MM-DD)", field='date'))

        if data.get('category') not in CATEGORIES:
            errors.append(ValidationError(
                f"Category must be one of: {', '.join(CATEGORIES)}", field='category',
            ))

        if data.get('status') not in STATUSES:
            errors.append(ValidationError("Status must be 'published' or 'draft'", field='status'))

        if image is not None:
            error = validate_image(image, 'image', max_bytes=editor_image_limit())
            if error:
                errors.append(error)

        return errors

    def _prepare(self, data: Dict[str, Any], title: str = '', creating: bool = False) -> Dict[str, Any]:
        """
        Editable fields of `data`, normalized for storage.

        A blank slug is generated from the title. Updates that leave the slug
        out keep the stored one even when the title changes.
        """
        fields = {name: data[name] for name in EDITABLE_FIELDS if name in data}
        if creating or 'slug' in fields:
            fields['slug'] = (
                generate_slug(fields.get('slug') or '')
                or generate_slug(fields.get('title') or title)
            )
        if isinstance(fields.get('content'), str):
            fields['content'] = fields['content'].strip()
        return fields

    def _upload_step(self, saga: Saga, image, progress=None):
        key = build_key(ARTICLES_NAMESPACE, image.name)

        def upload(context):
            return self.media.upload(key, image, getattr(image, 'content_type', None), progress)

        def remove_upload(context):
            # The backend may have renamed the blob; its URL names the real key
            self.media.delete_url(ARTICLES_NAMESPACE, context.result('upload_image'))

        saga.add_step('upload_image', upload, compensation=remove_upload, resource=key)

    def create_article(self, user, data: Dict[str, Any], image=None, progress=None) -> Dict[str, Any]:
        """
        Create an article, uploading its image first when one is given.

        Raises:
            FormValidationError: one entry per failing field
            UpstreamError: media or document store failure
        """
        require_authenticated(user)

        fields = {
            'author': '',
            'category': DEFAULT_CATEGORY,
            'status': STATUS_PUBLISHED,
            'imageUrl': '',
            **self._prepare(data, creating=True),
        }

        errors = self.validate(fields, image)
        if errors:
            raise FormValidationError(errors)

        saga = Saga('create_article', title=fields['title'])
        if image is not None:
            self._upload_step(saga, image, progress)

        def write(context):
            now = server_timestamp()
            document = {**fields, 'createdAt': now, 'updatedAt': now}
            if context.result('upload_image'):
                document['imageUrl'] = context.result('upload_image')
            return self.repository.create(ARTICLES, document)

        context = saga.add_step('write_article', write).run()
        article_id = context.result('write_article')

        logger.info("Article %s created by %s", article_id, user.pk)
        return self.repository.get(ARTICLES, article_id)

    def update_article(self, user, article_id: str, data: Dict[str, Any], image=None, progress=None) -> Dict[str, Any]:
        """
        Apply a partial update. A new image replaces the old one, whose blob
        is then removed best effort.
        """
        existing = self.get_article(user, article_id)

        changes = self._prepare(data, title=existing.get('title') or '')
        merged = {**existing, **changes}

        errors = self.validate(merged, image, exclude_id=article_id)
        if errors:
            raise FormValidationError(errors)

        previous_image = existing.get('imageUrl') or ''
        saga = Saga('update_article', article_id=article_id)
        if image is not None:
            self._upload_step(saga, image, progress)

        def write(context):
            update = {**changes, 'updatedAt': server_timestamp()}
            if context.result('upload_image'):
                update['imageUrl'] = context.result('upload_image')
            self.repository.update(ARTICLES, article_id, update)
            return update

        saga.add_step('write_article', write)

        if image is not None and previous_image:
            saga.add_step(
                'delete_previous_image',
                lambda context: self.media.delete_url(ARTICLES_NAMESPACE, previous_image),
                best_effort=True,
                resource=previous_image,
            )

        saga.run()
        logger.info("Article %s updated by %s", article_id, user.pk)
        return self.repository.get(ARTICLES, article_id)

    def remove_image(self, user, article_id: str) -> Dict[str, Any]:
        """Delete the article's image blob (best effort) and clear imageUrl."""
        article = self.get_article(user, article_id)
        image_url = article.get('imageUrl')
        if not image_url:
            return article

        saga = Saga('remove_article_image', article_id=article_id)
        saga.add_step(
            'delete_image',
            lambda context: self.media.delete_url(ARTICLES_NAMESPACE, image_url),
            best_effort=True,
            resource=image_url,
        )
        saga.add_step(
            'clear_image_url',
            lambda context: self.repository.update(
                ARTICLES, article_id, {'imageUrl': '', 'updatedAt': server_timestamp()},
            ),
        )
        saga.run()

        return self.repository.get(ARTICLES, article_id)

    def delete_article(self, user, article_id: str) -> None:
        """
        Delete an article and, best effort, its image.

        Deleting an article that no longer exists succeeds.
        """
        require_authenticated(user)

        article = self.repository.get(ARTICLES, article_id)
        if article is None:
            logger.info("Article %s already deleted", article_id)
            return

        saga = Saga('delete_article', article_id=article_id)
        image_url = article.get('imageUrl')
        if image_url:
            saga.add_step(
                'delete_image',
                lambda context: self.media.delete_url(ARTICLES_NAMESPACE, image_url),
                best_effort=True,
                resource=image_url,
            )
        saga.add_step('delete_document', lambda context: self.repository.delete(ARTICLES, article_id))
        saga.run()

        logger.info("Article %s deleted by %s", article_id, user.pk)

    # =========================================================================
    # Public reads
    # =========================================================================

    def feed(self, category: Optional[str], cursor: Optional[str] = None, page_size: Optional[int] = None) -> Dict[str, Any]:
        """
        One "load more" page of a category's published articles, newest first.

        The first page fetches one extra article and returns it separately
        as `featured`. `cursor` is an opaque token for the last article
        returned and stays valid if that article is deleted;
        `has_more` is true only when a full page came back.
        """
        page_size = page_size or settings.NEWSROOM_PAGE_SIZE
        category = resolve_category(category)

        query = (
            Query()
            .where('category', '==', category)
            .where('status', '==', STATUS_PUBLISHED)
            .ordered('date', 'desc')
        )

        featured = None
        if cursor:
            articles = self.repository.query(ARTICLES, query.limited(page_size).after(decode_feed_cursor(cursor)))
            has_more = len(articles) == page_size
        else:
            articles = self.repository.query(ARTICLES, query.limited(page_size + 1))
            has_more = len(articles) == page_size + 1
            if articles:
                featured, articles = articles[0], articles[1:]

        last = articles[-1] if articles else featured
        return {
            'category': category,
            'display': CATEGORIES[category],
            'featured': featured,
            'articles': articles,
            'cursor': encode_feed_cursor(last),
            'has_more': has_more,
        }

    def search(self, query_text: Optional[str]) -> List[Dict[str, Any]]:
        """
        Published articles matching any query term, newest first.

        A blank query returns nothing without touching the repository.
        """
        if not query_text or not query_text.split():
            return []

        published = self.repository.query(
            ARTICLES,
            Query().where('status', '==', STATUS_PUBLISHED).ordered('date', 'desc'),
        )
        return search_documents(published, query_text, ARTICLE_SEARCH_FIELDS)

    def get_by_slug(self, category: Optional[str], slug: str) -> Dict[str, Any]:
        category = resolve_category(category)
        query = (
            Query()
            .where('slug', '==', slug)
            .where('category', '==', category)
            .where('status', '==', STATUS_PUBLISHED)
            .limited(1)
        )
        found = self.repository.query(ARTICLES, query)
        if not found:
            raise NotFoundError(ARTICLES, f"{category}/{slug}")
        return found[0]

    # =========================================================================
    # Dashboard
    # =========================================================================

    def dashboard(self, user) -> Dict[str, Any]:
        require_authenticated(user)
        return {
            'articles': self.repository.count(ARTICLES),
            'upcoming_events': self.repository.count(EVENTS, [Filter('status', '==', 'upcoming')]),
            'submissions': self.repository.count(SUBMISSIONS, [Filter('status', '==', 'pending')]),
            'recent_articles': self.repository.query(
                ARTICLES, Query().ordered('date', 'desc').limited(RECENT_ARTICLES_LIMIT),
            ),
        }
