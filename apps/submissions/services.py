"""
Submission and review workflows.

Lifecycle of a submission document:

    submit()   -> pending
    approve()  -> copied into a published article, submission deleted,
                  image kept (the article reuses its URL)
    reject()   -> image deleted best effort, submission deleted

Neither store is transactional with the other, so each workflow runs as a
Saga. Blob deletes are best effort: a failure is logged as an
OrphanResourceWarning and the document mutation still happens.
"""

import logging
from typing import Any, Dict, List, Optional

from django.utils import timezone

from apps.articles.search import SortState
from apps.articles.services import STATUS_PUBLISHED, resolve_category, unique_slug
from apps.articles.text import generate_slug
from apps.core.documents import (
    ARTICLES,
    SUBMISSIONS,
    Query,
    default_repository,
    server_timestamp,
)
from apps.core.exceptions import FormValidationError, NotFoundError, ValidationError
from apps.core.permissions import require_authenticated
from apps.core.saga import Saga, SagaContext
from apps.media.storage import SUBMISSIONS_NAMESPACE, build_key, default_media_store
from apps.media.validators import validate_image

logger = logging.getLogger(__name__)


STATUS_PENDING = 'pending'
ANONYMOUS_AUTHOR = 'Anonymous'
SORT_FIELDS = ('createdAt', 'title')

# (form field, required message, minimum length, too-short message)
FORM_RULES = (
    ('title', "Title is required", 5, "Title must be at least 5 characters"),
    ('shortDescription', "Short description is required", 50,
     "Description must be at least 50 characters"),
    ('fullArticle', "Article content is required", 300,
     "Article must be at least 300 characters"),
)


def validate_submission(form: Dict[str, Any], image=None) -> List[ValidationError]:
    """
    Every field error of the public form, in form order.

    The image only has to be an image; there is no size cap for readers.
    """
    errors = []
    for name, required, min_length, too_short in FORM_RULES:
        value = str(form.get(name) or '').strip()
        if not value:
            errors.append(ValidationError(required, field=name))
        elif len(value) < min_length:
            errors.append(ValidationError(too_short, field=name))

    if image is not None:
        error = validate_image(image, 'mediaFile')
        if error:
            errors.append(error)

    return errors


class SubmissionService:
    """Submit, list, approve and reject reader submissions."""

    def __init__(self, repository=None, media=None):
        self.repository = repository or default_repository
        self.media = media or default_media_store

    # =========================================================================
    # Public
    # =========================================================================

    def submit(self, form: Dict[str, Any], image=None, progress=None) -> str:
        """
        Validate the public form and store a pending submission.

        The image, when present, is uploaded before the document is written;
        if the write then fails the upload is deleted again.

        Returns:
            The new submission id

        Raises:
            FormValidationError: one entry per failing field
            UpstreamError: media or document store failure
        """
        errors = validate_submission(form, image)
        if errors:
            raise FormValidationError(errors)

        title = form['title'].strip()
        document = {
            'title': title,
            'description': form['shortDescription'].strip(),
            'content': form['fullArticle'].strip(),
            'author': (form.get('authorName') or '').strip(),
            'category': resolve_category(form.get('category')),
            'status': STATUS_PENDING,
            'date': timezone.now().isoformat(),
            'slug': generate_slug(title),
        }

        saga = Saga('submit', title=title)

        if image is not None:
            key = build_key(SUBMISSIONS_NAMESPACE, image.name)
            saga.add_step(
                'upload_image',
                lambda context: self.media.upload(key, image, getattr(image, 'content_type', None), progress),
                compensation=lambda context: self.media.delete_url(
                    SUBMISSIONS_NAMESPACE, context.result('upload_image'),
                ),
                resource=key,
            )

        def write(context: SagaContext) -> str:
            data = {**document, 'createdAt': server_timestamp()}
            if context.result('upload_image'):
                data['imageUrl'] = context.result('upload_image')
            return self.repository.create(SUBMISSIONS, data)

        submission_id = saga.add_step('write_submission', write).run().result('write_submission')
        logger.info("Submission %s received (%s)", submission_id, document['category'])
        return submission_id

    # =========================================================================
    # Editor: reads
    # =========================================================================

    def list_submissions(self, user, sort: Optional[SortState] = None) -> List[Dict[str, Any]]:
        require_authenticated(user)
        sort = sort or SortState('createdAt', 'desc')
        return self.repository.query(SUBMISSIONS, Query().ordered(sort.field, sort.direction))

    def get_submission(self, user, submission_id: str) -> Dict[str, Any]:
        require_authenticated(user)
        return self._load(submission_id)

    def _load(self, submission_id: str) -> Dict[str, Any]:
        submission = self.repository.get(SUBMISSIONS, submission_id)
        if submission is None:
            raise NotFoundError(SUBMISSIONS, submission_id)
        return submission

    # =========================================================================
    # Editor: review
    # =========================================================================

    def approve(self, user, submission_id: str) -> str:
        """
        Publish a submission as a new article and delete the submission.

        The article is created first so a failure leaves the submission in
        place for a retry. The image is not copied: the article points at
        the submission's blob.

        Returns:
            The new article id

        Raises:
            NotFoundError: no such submission (including one already approved)
        """
        require_authenticated(user)
        submission = self._load(submission_id)

        category = resolve_category(submission.get('category'))
        slug = submission.get('slug') or generate_slug(submission.get('title'))
        now = server_timestamp()
        article = {
            'title': submission.get('title') or '',
            'description': submission.get('shortDescription') or submission.get('description') or '',
            'content': submission.get('content') or submission.get('fullArticle') or '',
            'author': submission.get('author') or ANONYMOUS_AUTHOR,
            'category': category,
            'date': now,
            'imageUrl': submission.get('imageUrl') or '',
            'slug': unique_slug(self.repository, category, slug),
            'status': STATUS_PUBLISHED,
            'createdAt': now,
            'updatedAt': now,
        }

        saga = Saga('approve_submission', submission_id=submission_id)
        saga.add_step(
            'create_article',
            lambda context: self.repository.create(ARTICLES, article),
            compensation=lambda context: self.repository.delete(ARTICLES, context.result('create_article')),
        )
        saga.add_step('delete_submission', lambda context: self.repository.delete(SUBMISSIONS, submission_id))
        article_id = saga.run().result('create_article')

        logger.info("Submission %s approved as article %s by %s", submission_id, article_id, user.pk)
        return article_id

    def reject(self, user, submission_id: str) -> List[Warning]:
        """
        Delete a submission and, best effort, its image.

        Returns the cleanup warnings, empty when everything was removed.

        Raises:
            NotFoundError: no such submission
        """
        require_authenticated(user)
        submission = self._load(submission_id)
        warnings = self._discard('reject_submission', submission)
        logger.info("Submission %s rejected by %s", submission_id, user.pk)
        return warnings

    def delete_submission(self, user, submission_id: str) -> List[Warning]:
        """Like reject(), but deleting a missing submission succeeds."""
        require_authenticated(user)
        submission = self.repository.get(SUBMISSIONS, submission_id)
        if submission is None:
            logger.info("Submission %s already deleted", submission_id)
            return []
        return self._discard('delete_submission', submission)

    def _discard(self, name: str, submission: Dict[str, Any]) -> List[Warning]:
        submission_id = submission['id']
        image_url = submission.get('imageUrl')

        saga = Saga(name, submission_id=submission_id)
        if image_url:
            saga.add_step(
                'delete_image',
                lambda context: self.media.delete_url(SUBMISSIONS_NAMESPACE, image_url),
                best_effort=True,
                resource=image_url,
            )
        saga.add_step('delete_document', lambda context: self.repository.delete(SUBMISSIONS, submission_id))
        return saga.run().warnings
