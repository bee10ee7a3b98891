"""Readable-content extraction.

Article selection is delegated to readability.  Code blocks are the one
thing readability handles badly: a ``pre`` full of short lines has little
text per tag, so its containers score poorly and are pruned.  Before
readability runs, every ``pre``/``code`` element and each of its ancestors
is tagged with a preservation class and a maximal score attribute.  The
class keeps them out of readability's unlikely-candidate sweep without
letting them decide which container wins.  Marked code that readability
still leaves out is put back afterwards, as the largest marked subtree that
shares no text with the article, in document order.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass

import lxml.html
from lxml import etree
from lxml.etree import ParserError
from readability import Document
from readability.readability import Unparseable

from pagedigest.exceptions import NoArticleFound

logger = logging.getLogger(__name__)

PRESERVE_CLASS = "article-content"
SCORE_ATTRIBUTE = "data-readable-content-score"
PRESERVE_SCORE = 100
MIN_TEXT_LENGTH = 20

# Extraction containers; marking stops below them.
_ROOT_TAGS = frozenset({"html", "body"})

_NOISE_TAGS = (
    "script", "style", "noscript", "template", "iframe", "svg",
    "form", "textarea", "select", "button", "object", "embed",
)

# Elements whose text, when already in the article, means the subtree is too.
_TEXT_BLOCK_TAGS = ("p", "pre", "li", "td", "th", "blockquote", "h1", "h2", "h3", "h4", "h5", "h6")


@dataclass
class ReadableDocument:
    """The article part of a page."""

    title: str
    content: str


# ---------------------------------------------------------------------------
# Preservation marking
# ---------------------------------------------------------------------------


def is_marked(el: lxml.html.HtmlElement) -> bool:
    return PRESERVE_CLASS in (el.get("class") or "").split()


def _mark(el: lxml.html.HtmlElement) -> None:
    classes = (el.get("class") or "").split()
    classes.append(PRESERVE_CLASS)
    el.set("class", " ".join(classes))
    el.set(SCORE_ATTRIBUTE, str(PRESERVE_SCORE))


def mark_code_ancestors(root: lxml.html.HtmlElement) -> int:
    """Mark every ``pre``/``code`` element and all of its ancestors.

    The walk goes upward and stops at the first node that is already
    marked, so shared ancestors are visited once and re-marking is a no-op.

    Returns:
        The number of elements newly marked.
    """
    marked = 0
    for code_el in list(root.iter("pre", "code")):
        el = code_el
        while el is not None and el.tag not in _ROOT_TAGS and not is_marked(el):
            _mark(el)
            marked += 1
            el = el.getparent()
    return marked


class _MarkAwareDocument(Document):
    """``Document`` whose class weighting ignores the preservation class.

    The marker still matches readability's maybe-a-candidate pattern, which
    keeps marked elements out of the unlikely-candidate sweep, but it must not
    add to a container's score: a code wrapper would otherwise outrank the
    prose around it.
    """

    def class_weight(self, e):
        classes = e.get("class")
        if not classes or PRESERVE_CLASS not in classes.split():
            return super().class_weight(e)
        e.set("class", " ".join(c for c in classes.split() if c != PRESERVE_CLASS))
        try:
            return super().class_weight(e)
        finally:
            e.set("class", classes)


# ---------------------------------------------------------------------------
# Restoring dropped code
# ---------------------------------------------------------------------------


def _text(el: lxml.html.HtmlElement) -> str:
    return " ".join((el.text_content() or "").split())


def _code_elements(root: lxml.html.HtmlElement) -> list[lxml.html.HtmlElement]:
    """``pre`` elements plus ``code`` elements that are not inside a ``pre``."""
    found = []
    for el in root.iter("pre", "code"):
        if el.tag == "code" and any(a.tag == "pre" for a in el.iterancestors()):
            continue
        found.append(el)
    return found


def _shares_text(el: lxml.html.HtmlElement, article_text: str) -> bool:
    for block in el.iter(*_TEXT_BLOCK_TAGS):
        text = _text(block)
        if text and text in article_text:
            return True
    return False


def _missing_code_subtrees(
    root: lxml.html.HtmlElement,
    article: lxml.html.HtmlElement,
) -> list[lxml.html.HtmlElement]:
    """Largest marked subtrees holding code the article lost, in document order."""
    article_text = _text(article)
    subtrees: list[lxml.html.HtmlElement] = []

    for code_el in _code_elements(root):
        text = _text(code_el)
        if not text or text in article_text:
            continue
        el = code_el
        parent = el.getparent()
        while parent is not None and is_marked(parent) and not _shares_text(parent, article_text):
            el = parent
            parent = el.getparent()
        if any(el is kept or kept in el.iterancestors() for kept in subtrees):
            continue
        subtrees.append(el)
    return subtrees


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_readable(html: str) -> ReadableDocument:
    """Return the readable part of *html*.

    Raises:
        NoArticleFound: If no article body can be identified.
    """
    if not html or not html.strip():
        raise NoArticleFound()

    try:
        root = lxml.html.document_fromstring(html)
    except (ParserError, ValueError) as e:
        logger.warning("Could not parse HTML for extraction: %s", e)
        raise NoArticleFound() from e

    title = (root.findtext(".//title") or "").strip()

    etree.strip_elements(root, etree.Comment, *_NOISE_TAGS, with_tail=False)
    marked = mark_code_ancestors(root)
    logger.debug("Marked %d code-bearing element(s) for preservation", marked)

    try:
        summary = _MarkAwareDocument(
            lxml.html.tostring(root, encoding="unicode"),
            min_text_length=MIN_TEXT_LENGTH,
        ).summary(html_partial=True)
    except Unparseable as e:
        logger.warning("Readability could not parse the page: %s", e)
        raise NoArticleFound() from e

    if not summary or not summary.strip():
        raise NoArticleFound()

    article = lxml.html.fragment_fromstring(summary, create_parent="div")

    restored = _missing_code_subtrees(root, article)
    for subtree in restored:
        copy = deepcopy(subtree)
        copy.tail = None
        article.append(copy)
    if restored:
        logger.debug("Restored %d code block(s) dropped by readability", len(restored))

    if not _text(article):
        raise NoArticleFound()

    if not title:
        h1 = next(article.iter("h1"), None)
        title = _text(h1) if h1 is not None else ""

    return ReadableDocument(title=title, content=lxml.html.tostring(article, encoding="unicode"))
