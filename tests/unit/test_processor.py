"""End-to-end tests for the HTML to Markdown content pipeline."""

from __future__ import annotations

import pytest

from pagedigest.content import process_html_content
from pagedigest.exceptions import NoArticleFound


class TestProcessHtmlContent:
    def test_article_with_code(self, article_with_code_html: str) -> None:
        md = process_html_content(article_with_code_html)

        assert md.startswith("# Reading YAML configs in Python")
        assert "Configuration files tend to grow over time" in md
        assert "[PyYAML](https://pyyaml.org/)" in md
        assert "```python\nimport yaml\ndef load(path):\n    with open(path) as fh:\n        return yaml.safe_load(fh)\n```" in md
        assert "Accept all" not in md
        assert "Related one" not in md
        assert "<" not in md

    def test_article_with_table(self, article_with_table_html: str) -> None:
        md = process_html_content(article_with_table_html)

        assert md.startswith("# Release channels")
        assert (
            "| Channel | Cadence | Notes |\n"
            "| --- | --- | --- |\n"
            "| stable | monthly | Recommended |\n"
            "| beta | weekly | |\n"
            "| nightly | daily | amd64 \\| arm64 |"
        ) in md
        assert "downgrading from nightly to stable" in md

    def test_empty_page_raises(self) -> None:
        with pytest.raises(NoArticleFound):
            process_html_content("")
