"""Raw page HTML to Markdown: extract, sanitize, render."""

from __future__ import annotations

import logging

from pagedigest.content.extractor import extract_readable
from pagedigest.content.markdown import render_markdown
from pagedigest.content.sanitizer import sanitize_html

logger = logging.getLogger(__name__)


def process_html_content(html: str) -> str:
    """Convert the main-content HTML of a page into Markdown.

    Raises:
        NoArticleFound: If no readable article can be extracted.
    """
    article = extract_readable(html)
    clean_html = sanitize_html(article.content)
    markdown = render_markdown(clean_html)
    logger.info(
        "Processed content: %d chars HTML -> %d chars Markdown (title=%r)",
        len(html),
        len(markdown),
        article.title,
    )
    return markdown
