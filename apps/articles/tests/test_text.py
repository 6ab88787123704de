"""
Tests for slug generation and content formatting.

Tests cover:
- Slug character set, edge hyphens and length cap
- Determinism and dropping of non-ASCII letters
- Paragraph and line-break rendering
- HTML escaping of plain text
"""

import re

import pytest
from django.test import override_settings

from apps.articles.text import format_content, generate_slug

SLUG_RE = re.compile(r'^[a-z0-9-]{0,80}$')


# ============================================================================
# Slug Tests
# ============================================================================

class TestGenerateSlug:
    """Test title to slug conversion."""

    def test_basic_title(self):
        assert generate_slug("Hello World") == "hello-world"

    def test_punctuation_removed(self):
        assert generate_slug("  Hello, World -- Again!  ") == "hello-world-again"

    def test_underscores_and_hyphen_runs_collapse(self):
        assert generate_slug("snake_case__and---dashes") == "snake-case-and-dashes"

    def test_edge_hyphens_trimmed(self):
        assert generate_slug("-- Breaking: news --") == "breaking-news"

    def test_accented_letters_dropped(self):
        assert generate_slug("Café Olé") == "caf-ol"
        assert generate_slug("  ¿Qué pasa?  ") == "qu-pasa"

    def test_empty_and_none(self):
        assert generate_slug("") == ""
        assert generate_slug(None) == ""
        assert generate_slug("!!!") == ""

    def test_truncated_to_80(self):
        slug = generate_slug("word " * 40)

        assert len(slug) <= 80
        assert not slug.endswith("-")

    def test_explicit_max_length(self):
        assert generate_slug("one two three", max_length=7) == "one-two"

    @override_settings(NEWSROOM_SLUG_MAX_LENGTH=5)
    def test_max_length_from_settings(self):
        assert generate_slug("abcdefgh") == "abcde"

    @pytest.mark.parametrize("title", [
        "Student Council Elects New President",
        "  ¿Qué pasa?  ",
        "100% Guaranteed!!! (Not Really)",
        "tabs\tand\nnewlines",
        "日本語のタイトル",
        "a" * 200,
        "--",
    ])
    def test_output_shape(self, title):
        slug = generate_slug(title)

        assert SLUG_RE.match(slug)
        assert not slug.startswith("-")
        assert not slug.endswith("-")
        assert generate_slug(title) == slug


# ============================================================================
# Formatter Tests
# ============================================================================

class TestFormatContent:
    """Test plain text to paragraph rendering."""

    def test_two_paragraphs(self):
        assert format_content("a\n\nb") == "<p>a</p>\n\n<p>b</p>"

    def test_single_newline_is_line_break(self):
        assert format_content("a\nb") == "<p>a<br>\nb</p>"

    def test_empty(self):
        assert format_content("") == ""
        assert format_content(None) == ""

    def test_blank_paragraphs_dropped(self):
        assert format_content("a\n\n   \n\n\nb\n\n") == "<p>a</p>\n\n<p>b</p>"

    def test_windows_newlines(self):
        assert format_content("a\r\n\r\nb") == "<p>a</p>\n\n<p>b</p>"

    def test_paragraph_whitespace_trimmed(self):
        assert format_content("   hello   ") == "<p>hello</p>"

    def test_markup_escaped(self):
        html = format_content("<script>alert(1)</script>")

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
