"""
Upload checks shared by the submission form and the article editor.
"""

import mimetypes
from typing import Optional

from django.conf import settings

from apps.core.exceptions import ValidationError


def content_type_of(upload) -> str:
    """MIME type announced by the upload, guessed from its name otherwise."""
    content_type = getattr(upload, 'content_type', None)
    if not content_type:
        content_type, _ = mimetypes.guess_type(getattr(upload, 'name', '') or '')
    return content_type or ''


def is_image(upload) -> bool:
    return content_type_of(upload).startswith('image/')


def validate_image(upload, field: str, max_bytes: Optional[int] = None) -> Optional[ValidationError]:
    """
    Check that `upload` is an image within the size cap.

    Returns the ValidationError for `field` instead of raising it so form
    validators can collect it alongside other field errors.
    """
    if not is_image(upload):
        return ValidationError("Please upload an image file (JPEG, PNG, etc.)", field=field)

    if max_bytes is not None and (upload.size or 0) > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        return ValidationError(f"Image must be less than {limit_mb:g}MB", field=field)

    return None


def editor_image_limit() -> int:
    return settings.NEWSROOM_MEDIA_MAX_BYTES
