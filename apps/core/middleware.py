"""
Request ID tracing for the Newsroom.

Every API request gets an id: the caller's X-Request-ID when it is a valid
UUID, a fresh one otherwise. The id is echoed in the response header, put
into every error body (see exceptions.get_request_id) and stamped on log
records through RequestIDFilter, so a failed approve or reject can be traced
from the editor's error banner to the saga warnings in the log.

Celery tasks run outside any request; they get an id of their own from
`setup_celery_request_context`.
"""

import logging
import threading
import uuid

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = 'HTTP_X_REQUEST_ID'
RESPONSE_HEADER = 'X-Request-ID'

_local = threading.local()


def get_request_id():
    """Request id of the current thread, or None outside a request."""
    return getattr(_local, 'request_id', None)


def get_editor_id():
    """Primary key of the signed-in editor of the current request, if any."""
    return getattr(_local, 'editor_id', None)


def bind_request_context(request_id, editor_id=None):
    _local.request_id = request_id
    _local.editor_id = editor_id


def clear_request_context():
    _local.request_id = None
    _local.editor_id = None


def _valid_request_id(value):
    if not value:
        return None
    try:
        return str(uuid.UUID(value))
    except (ValueError, TypeError, AttributeError):
        logger.debug("Ignoring malformed X-Request-ID %r", value)
        return None


class RequestIDMiddleware:
    """
    Assign `request.request_id` and echo it as X-Request-ID.

    Must sit after AuthenticationMiddleware so session editors are known;
    JWT editors are only resolved inside DRF and stay anonymous here.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = _valid_request_id(request.META.get(REQUEST_ID_HEADER)) or str(uuid.uuid4())
        request.request_id = request_id

        user = getattr(request, 'user', None)
        editor_id = user.pk if user is not None and user.is_authenticated else None
        bind_request_context(request_id, editor_id)

        try:
            response = self.get_response(request)
        finally:
            clear_request_context()

        response[RESPONSE_HEADER] = request_id
        return response


class RequestIDFilter(logging.Filter):
    """
    Adds `request_id` and `editor_id` to log records ('-' when unknown).

    Referenced from LOGGING['filters'] so the `[{request_id}]` prefix of the
    verbose formatter always resolves.
    """

    def filter(self, record):
        record.request_id = get_request_id() or '-'
        record.editor_id = get_editor_id() or '-'
        return True


def setup_celery_request_context(headers):
    """Bind a task to the request id it was sent with, or to a new one."""
    bind_request_context(_valid_request_id((headers or {}).get('request_id')) or str(uuid.uuid4()))
