"""
Text helpers for articles: slugs and plain-text to HTML rendering.
"""

import re
from typing import Optional

from django.conf import settings
from django.utils.html import escape

_NON_SLUG_CHARS = re.compile(r'[^\w\s-]', re.ASCII)
_SEPARATOR_RUNS = re.compile(r'[\s_-]+', re.ASCII)
_PARAGRAPH_BREAK = re.compile(r'\n{2,}')

LINE_BREAK = '<br>\n'


def generate_slug(title: Optional[str], max_length: Optional[int] = None) -> str:
    """
    URL-safe identifier for a title.

    Lowercases, drops everything but letters, digits, whitespace and hyphens,
    turns separator runs into single hyphens and trims edge hyphens.
    Only ASCII letters count as letters, so accented ones are dropped
    ("Café" -> "caf") and existing slugs keep matching their titles.

    >>> generate_slug("  Hello, World -- Again!  ")
    'hello-world-again'
    """
    if not title:
        return ''

    max_length = max_length or settings.NEWSROOM_SLUG_MAX_LENGTH

    text = title.lower().strip()
    text = _NON_SLUG_CHARS.sub('', text)
    text = _SEPARATOR_RUNS.sub('-', text)
    text = text.strip('-')

    return text[:max_length].rstrip('-')


def format_content(content: Optional[str]) -> str:
    """
    Render plain article text as HTML paragraphs.

    Blank-line separated blocks become <p> elements joined by a blank line;
    single newlines inside a block become <br>. Text is HTML-escaped, so the
    input must be plain text: feeding already-rendered HTML back in escapes
    the markup instead of nesting paragraphs.

    >>> format_content("a\\nb\\n\\nc")
    '<p>a<br>\\nb</p>\\n\\n<p>c</p>'
    """
    if not content:
        return ''

    text = content.replace('\r\n', '\n').replace('\r', '\n')
    paragraphs = []
    for block in _PARAGRAPH_BREAK.split(text):
        block = block.strip()
        if not block:
            continue
        html = LINE_BREAK.join(escape(block).split('\n'))
        paragraphs.append(f"<p>{html}</p>")

    return '\n\n'.join(paragraphs)
