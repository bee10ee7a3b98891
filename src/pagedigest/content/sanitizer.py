"""Allow-list HTML sanitizer.

Only structural and text tags survive; every other tag is unwrapped (its
text kept) except for script-like tags, which are removed with their
content.  Attributes are kept only where listed below.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Comment

logger = logging.getLogger(__name__)

ALLOWED_TAGS: frozenset[str] = frozenset({
    "h1", "h2", "h3", "h4", "h5", "h6",
    "p", "a", "ul", "ol", "li",
    "b", "i", "strong", "em",
    "code", "pre", "div", "span",
    "table", "thead", "tbody", "tr", "th", "td",
})

ALLOWED_ATTRIBUTES: dict[str, frozenset[str]] = {
    "a": frozenset({"href"}),
    "pre": frozenset({"class", "data-language"}),
    "code": frozenset({"class", "data-language"}),
    "div": frozenset({"class"}),
    "span": frozenset({"class"}),
}

# Removed together with everything inside them.
DROPPED_WITH_CONTENT: tuple[str, ...] = ("script", "style", "noscript", "textarea", "option", "template", "iframe")

ALLOWED_URL_SCHEMES: frozenset[str] = frozenset({"http", "https", "ftp", "mailto", "tel"})


def _safe_href(href: str) -> bool:
    scheme = urlsplit(href.strip()).scheme.lower()
    return not scheme or scheme in ALLOWED_URL_SCHEMES


def sanitize_html(html: str) -> str:
    """Return *html* reduced to the allowed tags and attributes."""
    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    for el in soup.find_all(DROPPED_WITH_CONTENT):
        el.decompose()

    unwrapped = 0
    for el in soup.find_all(True):
        if el.name not in ALLOWED_TAGS:
            el.unwrap()
            unwrapped += 1
            continue
        allowed = ALLOWED_ATTRIBUTES.get(el.name, frozenset())
        el.attrs = {name: value for name, value in el.attrs.items() if name in allowed}
        if el.name == "a" and "href" in el.attrs and not _safe_href(el["href"]):
            del el["href"]

    logger.debug("Sanitizer unwrapped %d disallowed tag(s)", unwrapped)
    return str(soup)
