"""
Markdown rendering for blog posts and project readmes.
"""

from __future__ import annotations

import html
import logging
import math

import markdown

from shared.constants import WORDS_PER_MINUTE

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists", "toc"]


def _build_converter() -> markdown.Markdown:
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS, output_format="html")
    # Without these, raw HTML in posts is passed through instead of escaped.
    md.preprocessors.deregister("html_block")
    md.inlinePatterns.deregister("html")
    return md


def markdown_to_html(text: str) -> str:
    if not text or not isinstance(text, str):
        return ""
    try:
        return _build_converter().convert(text)
    except Exception:
        logger.exception("Error converting markdown to HTML")
        return f'<pre class="whitespace-pre-wrap">{html.escape(text)}</pre>'


def estimate_read_time(text: str) -> int:
    """Minutes to read `text` at WORDS_PER_MINUTE, never less than one."""
    words = len((text or "").split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))
