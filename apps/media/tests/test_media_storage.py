"""
Tests for the media store.

Tests cover:
- Storage key extraction from bucket and CDN URLs
- Timestamped key naming
- Upload / delete against a filesystem storage
- Progress reporting
- Upload validation (MIME type, size cap)
"""

import pytest
from unittest.mock import MagicMock
from django.core.files.storage import FileSystemStorage
from django.core.files.uploadedfile import SimpleUploadedFile

from apps.core.exceptions import UpstreamError
from apps.media.storage import (
    DjangoMediaStore,
    build_key,
    namespace_from_url,
    storage_key_from_url,
)
from apps.media.validators import validate_image, is_image


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def storage(tmp_path):
    """Filesystem storage rooted in a temp directory."""
    return FileSystemStorage(location=str(tmp_path), base_url='/media/')


@pytest.fixture
def store(storage):
    return DjangoMediaStore(storage=storage)


# ============================================================================
# Key Extraction Tests
# ============================================================================

class TestStorageKeyFromUrl:
    """Test recovery of storage keys from URLs."""

    def test_encoded_submissions_namespace(self):
        url = "https://x/o/submissions%2Fabc123.jpg?alt=media"
        assert storage_key_from_url(url) == "abc123.jpg"

    def test_encoded_articles_namespace(self):
        url = "https://x/o/articles%2F1700000000000_photo.png?alt=media&token=t"
        assert storage_key_from_url(url) == "1700000000000_photo.png"

    def test_encoded_namespace_without_query(self):
        assert storage_key_from_url("https://x/o/articles%2Fpic.gif") == "pic.gif"

    def test_fallback_last_segment(self):
        assert storage_key_from_url("https://x/abc123.jpg") == "abc123.jpg"

    def test_fallback_strips_query(self):
        assert storage_key_from_url("https://cdn.example.com/a/b/abc123.jpg?v=2") == "abc123.jpg"

    def test_media_url_path(self):
        assert storage_key_from_url("/media/submissions/1700_x.jpg") == "1700_x.jpg"

    def test_empty_url(self):
        assert storage_key_from_url("") is None
        assert storage_key_from_url(None) is None

    def test_trailing_slash_yields_nothing(self):
        assert storage_key_from_url("https://x/") is None


class TestBuildKey:
    """Test timestamped key naming."""

    def test_namespace_and_timestamp_prefix(self):
        assert build_key("submissions", "photo.jpg", now_ms=1700000000000) == \
            "submissions/1700000000000_photo.jpg"

    def test_unsafe_filename_is_cleaned(self):
        key = build_key("articles", "my photo.jpg", now_ms=1)
        assert key == "articles/1_my_photo.jpg"

    def test_default_timestamp_is_millis(self):
        key = build_key("articles", "a.png")
        millis = key.split("/")[1].split("_")[0]
        assert len(millis) >= 13


# ============================================================================
# Django Media Store Tests
# ============================================================================

class TestDjangoMediaStore:
    """Test upload and delete against a filesystem backend."""

    def test_upload_returns_url(self, store, storage):
        url = store.upload("submissions/1_a.jpg", b"image-bytes", "image/jpeg")

        assert url == "/media/submissions/1_a.jpg"
        assert storage.exists("submissions/1_a.jpg")

    def test_upload_uploaded_file(self, store, storage):
        upload = SimpleUploadedFile("b.png", b"\x89PNG....", content_type="image/png")

        url = store.upload("articles/2_b.png", upload, upload.content_type)

        assert url.endswith("articles/2_b.png")
        with storage.open("articles/2_b.png") as fh:
            assert fh.read() == b"\x89PNG...."

    def test_progress_reaches_100(self, store):
        seen = []
        store.upload("articles/3_c.jpg", b"x" * 200_000, "image/jpeg", progress=seen.append)

        assert seen
        assert seen[-1] == 100.0
        assert seen == sorted(seen)

    def test_delete_removes_blob(self, store, storage):
        store.upload("submissions/4_d.jpg", b"data")
        store.delete("submissions/4_d.jpg")

        assert not storage.exists("submissions/4_d.jpg")

    def test_delete_missing_is_noop(self, store):
        store.delete("submissions/never-uploaded.jpg")

    def test_delete_url_round_trip(self, store, storage):
        url = store.upload("submissions/5_e.jpg", b"data")

        key = store.delete_url("submissions", url)

        assert key == "submissions/5_e.jpg"
        assert not storage.exists(key)

    def test_delete_url_without_key(self, store):
        assert store.delete_url("articles", "") is None

    def test_backend_failure_is_upstream_error(self):
        broken = MagicMock()
        broken.save.side_effect = OSError("disk full")
        store = DjangoMediaStore(storage=broken)

        with pytest.raises(UpstreamError) as exc_info:
            store.upload("articles/6_f.jpg", b"data")

        assert exc_info.value.operation == "upload image"

    def test_delete_failure_is_upstream_error(self):
        broken = MagicMock()
        broken.delete.side_effect = PermissionError("denied")
        store = DjangoMediaStore(storage=broken)

        with pytest.raises(UpstreamError):
            store.delete("articles/7_g.jpg")


# ============================================================================
# Validation Tests
# ============================================================================

class TestValidateImage:
    """Test upload checks."""

    def test_image_passes(self):
        upload = SimpleUploadedFile("a.jpg", b"data", content_type="image/jpeg")
        assert validate_image(upload, "mediaFile") is None

    def test_non_image_rejected(self):
        upload = SimpleUploadedFile("a.pdf", b"data", content_type="application/pdf")

        error = validate_image(upload, "mediaFile")

        assert error.field == "mediaFile"
        assert error.message == "Please upload an image file (JPEG, PNG, etc.)"

    def test_size_cap(self):
        upload = SimpleUploadedFile("a.png", b"x" * 2048, content_type="image/png")

        error = validate_image(upload, "image", max_bytes=1024)

        assert error.field == "image"
        assert "less than" in error.message

    def test_type_guessed_from_name(self):
        upload = MagicMock(content_type=None, size=10)
        upload.name = "photo.png"
        assert is_image(upload)


class TestNamespaceFromUrl:
    """Test namespace detection for blob URLs."""

    def test_encoded_namespace(self):
        assert namespace_from_url("https://x/o/submissions%2Fa.jpg?alt=media", "articles") == "submissions"

    def test_path_namespace(self):
        assert namespace_from_url("/media/articles/1_a.jpg", "submissions") == "articles"

    def test_default_when_unknown(self):
        assert namespace_from_url("https://cdn.example.com/a.jpg", "articles") == "articles"

    def test_delete_url_follows_url_namespace(self, store, storage):
        url = store.upload("submissions/8_h.jpg", b"data")

        key = store.delete_url("articles", url)

        assert key == "submissions/8_h.jpg"
        assert not storage.exists(key)
