"""
Media store for article and submission images.

Blobs live under two namespaces:
- submissions/<epoch-millis>_<filename>   images attached to reader submissions
- articles/<epoch-millis>_<filename>      images uploaded by editors

Documents only keep the public URL of a blob. Deleting a blob later means
recovering its key from that URL, see `storage_key_from_url`.
"""

import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional, Union
from urllib.parse import unquote

from django.core.files import File
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.utils.text import get_valid_filename

from apps.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

SUBMISSIONS_NAMESPACE = 'submissions'
ARTICLES_NAMESPACE = 'articles'

# Percent-encoded slash between namespace and key, as emitted by bucket URLs
STORAGE_KEY_PATTERN = re.compile(r'(?:articles|submissions)%2F(.+?)(?:\?|$)')
NAMESPACE_PATTERN = re.compile(r'(articles|submissions)(?:%2F|/)')

ProgressCallback = Callable[[float], None]


def storage_key_from_url(url: Optional[str]) -> Optional[str]:
    """
    Recover the namespace-relative key of a blob from its URL.

    `.../o/submissions%2Fabc123.jpg?alt=media` -> `abc123.jpg`
    `https://cdn.example.com/abc123.jpg?v=2`    -> `abc123.jpg`

    Returns None for an empty URL or when no key can be found.
    """
    if not url:
        return None

    match = STORAGE_KEY_PATTERN.search(url)
    if match and match.group(1):
        return match.group(1)

    key = url.split('/')[-1].split('?')[0]
    return key or None


def namespace_from_url(url: Optional[str], default: str) -> str:
    """
    Namespace a blob URL points into.

    An approved submission keeps its image under `submissions/` even though
    the document now lives in `articles`, so the URL decides, not the caller.
    """
    match = NAMESPACE_PATTERN.search(url or '')
    return match.group(1) if match else default


def build_key(namespace: str, filename: str, now_ms: Optional[int] = None) -> str:
    """Timestamp-prefixed storage key inside a namespace."""
    millis = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{namespace}/{millis}_{get_valid_filename(filename)}"


# =============================================================================
# Interface
# =============================================================================

class MediaStore(ABC):
    """
    Abstract blob store.

    Implementations return a retrievable URL on upload and treat deleting a
    missing key as success.
    """

    @abstractmethod
    def upload(
        self,
        key: str,
        content: Union[bytes, File],
        content_type: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Store `content` under `key`.

        Args:
            key: Storage key, e.g. from build_key()
            content: Raw bytes or a Django File / UploadedFile
            content_type: MIME type recorded with the blob
            progress: Called with the percentage uploaded so far

        Returns:
            Public URL of the stored blob
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a blob. A missing key is not an error."""
        pass

    def url_to_key(self, url: Optional[str]) -> Optional[str]:
        """Namespace-relative key of the blob served at `url`."""
        return storage_key_from_url(url)

    def key_for_url(self, namespace: str, url: Optional[str]) -> Optional[str]:
        """Full storage key of the blob behind `url`, or None."""
        name = self.url_to_key(url)
        if not name:
            return None
        return f"{namespace_from_url(url, namespace)}/{name}"

    def delete_url(self, namespace: str, url: Optional[str]) -> Optional[str]:
        """
        Delete the blob behind `url`, in `namespace` unless the URL names one.

        Returns the deleted key, or None when the URL yields no key.
        """
        key = self.key_for_url(namespace, url)
        if not key:
            logger.warning("Could not extract storage key from URL: %s", url)
            return None
        self.delete(key)
        return key


# =============================================================================
# Django Storage Implementation
# =============================================================================

class ProgressFile(File):
    """File wrapper that reports how much of itself has been read."""

    def __init__(self, file, progress: Optional[ProgressCallback] = None):
        super().__init__(file.file if isinstance(file, File) else file, name=getattr(file, 'name', None))
        self._progress = progress
        self._reported = -1.0

    def _report(self, done: int):
        if not self._progress:
            return
        total = self.size or 0
        percent = 100.0 if total == 0 else min(100.0, done * 100.0 / total)
        if percent > self._reported:
            self._reported = percent
            self._progress(percent)

    def chunks(self, chunk_size=None):
        done = 0
        for chunk in super().chunks(chunk_size):
            done += len(chunk)
            self._report(done)
            yield chunk

    def finish(self):
        self._report(self.size or 0)


class DjangoMediaStore(MediaStore):
    """MediaStore over a Django storage backend (default_storage unless given)."""

    def __init__(self, storage=None):
        self.storage = storage if storage is not None else default_storage

    def upload(self, key, content, content_type=None, progress=None) -> str:
        if isinstance(content, (bytes, bytearray)):
            content = ContentFile(bytes(content), name=key.rsplit('/', 1)[-1])

        upload = ProgressFile(content, progress)
        if content_type:
            upload.content_type = content_type

        try:
            name = self.storage.save(key, upload)
            url = self.storage.url(name)
        except Exception as e:
            logger.error("Upload of %s failed: %s", key, e)
            raise UpstreamError(operation="upload image") from e

        upload.finish()
        logger.info("Uploaded %s (%s bytes)", name, upload.size)
        return url

    def delete(self, key: str) -> None:
        try:
            self.storage.delete(key)
        except FileNotFoundError:
            logger.debug("Delete of missing blob %s ignored", key)
        except Exception as e:
            logger.error("Delete of %s failed: %s", key, e)
            raise UpstreamError(operation="delete image") from e
        else:
            logger.info("Deleted blob %s", key)

    def url_to_key(self, url):
        key = storage_key_from_url(url)
        return unquote(key) if key else None


# Global media store instance
default_media_store = DjangoMediaStore()
