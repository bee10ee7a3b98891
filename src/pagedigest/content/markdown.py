"""Markdown rendering with custom code-block and table rules.

``html2text`` handles headings, inline markup, links and lists.  Code blocks
and tables follow stricter rules than it applies, so they are rendered here
first and each one is swapped for a placeholder paragraph; the placeholders
are replaced with the rendered blocks once html2text has run.
"""

from __future__ import annotations

import re

import html2text
from bs4 import BeautifulSoup, Tag

DEFAULT_CODE_LANGUAGE = "yaml"

_LANGUAGE_CLASS_RE = re.compile(r"language-(\w+)")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_PLACEHOLDER = "PAGEDIGESTBLOCK{}X"


def _classes(el: Tag) -> list[str]:
    value = el.get("class") or []
    return value.split() if isinstance(value, str) else list(value)


def code_language(pre: Tag) -> str:
    """Language tag for a ``pre`` block.

    Order: a ``language-xxx`` class on a nested ``code``, then the block's
    ``data-language`` attribute, then ``yaml``.
    """
    code = pre.find("code")
    if code is not None:
        match = _LANGUAGE_CLASS_RE.search(" ".join(_classes(code)))
        if match:
            return match.group(1)
    return pre.get("data-language") or DEFAULT_CODE_LANGUAGE


def render_code_block(pre: Tag) -> str:
    content = pre.get_text().strip("\n")
    content = re.sub(r"\n\n+", "\n", content)
    return f"```{code_language(pre)}\n{content}\n```"


def render_cell(cell: Tag) -> str:
    """``" text |"``; a whitespace-only cell renders as ``" |"``."""
    paragraphs = cell.find_all("p")
    if paragraphs:
        text = " ".join(p.get_text() for p in paragraphs)
    else:
        text = cell.get_text()
    text = " ".join(text.split()).replace("|", "\\|")
    return f" {text} |" if text else " |"


def _own_rows(table: Tag) -> list[Tag]:
    return [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]


def _cells(row: Tag) -> list[Tag]:
    return row.find_all(["th", "td"], recursive=False)


def _header_rows(rows: list[Tag]) -> list[Tag]:
    """Rows inside ``thead``; without one, a leading all-``th`` row."""
    in_thead = [row for row in rows if row.parent is not None and row.parent.name == "thead"]
    if in_thead:
        return in_thead
    if rows:
        cells = _cells(rows[0])
        if cells and all(cell.name == "th" for cell in cells):
            return [rows[0]]
    return []


def render_row(row: Tag, *, separator: bool = False) -> str:
    """``"|" + cells``, followed by a ``| --- |`` separator row when asked."""
    cells = _cells(row)
    output = "|" + "".join(render_cell(cell) for cell in cells)
    if separator:
        output += "\n|" + " --- |" * len(cells)
    return output + "\n"


def render_table(table: Tag) -> str:
    rows = _own_rows(table)
    headers = _header_rows(rows)
    last_header = headers[-1] if headers else None

    body = "".join(render_row(row, separator=row is last_header) for row in rows)
    return re.sub(r"\n+", "\n", body).strip("\n")


def _html2text() -> html2text.HTML2Text:
    converter = html2text.HTML2Text()
    converter.body_width = 0
    converter.unicode_snob = True
    converter.ignore_links = False
    converter.ignore_images = False
    converter.ul_item_mark = "*"
    return converter


def _swap_out_blocks(soup: BeautifulSoup) -> list[str]:
    """Replace top-level tables, then ``pre`` blocks, with placeholder paragraphs."""
    blocks: list[str] = []

    def swap(el: Tag, rendered: str) -> None:
        if not rendered:
            el.decompose()
            return
        placeholder = soup.new_tag("p")
        placeholder.string = _PLACEHOLDER.format(len(blocks))
        blocks.append(rendered)
        el.replace_with(placeholder)

    for table in soup.find_all("table"):
        if table.find_parent("table") is None:
            swap(table, render_table(table))
    for pre in soup.find_all("pre"):
        swap(pre, render_code_block(pre))
    return blocks


def render_markdown(html: str) -> str:
    """Convert sanitized HTML into Markdown."""
    soup = BeautifulSoup(html, "html.parser")
    blocks = _swap_out_blocks(soup)

    markdown = _html2text().handle(str(soup))
    for index, block in enumerate(blocks):
        markdown = markdown.replace(_PLACEHOLDER.format(index), block)
    return _EXCESS_NEWLINES_RE.sub("\n\n", markdown).strip()
