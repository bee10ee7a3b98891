"""Unit tests for the scrape-webpage tool surface."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from pagedigest.models.results import ScrapeResult
from pagedigest.tools import (
    DEFAULT_MAX_CONTENT_CHARS,
    TOOL_NAME,
    error_response,
    scrape_webpage,
    success_response,
    truncate_content,
)


class TestTruncation:
    def test_short_content_is_untouched(self) -> None:
        text, truncated = truncate_content("abc")
        assert text == "abc"
        assert truncated is False

    def test_content_at_limit_is_untouched(self) -> None:
        content = "x" * DEFAULT_MAX_CONTENT_CHARS
        text, truncated = truncate_content(content)
        assert text is content
        assert truncated is False

    def test_long_content_is_cut(self) -> None:
        text, truncated = truncate_content("x" * 150_000)
        assert len(text) == 100_000
        assert truncated is True


class TestResponses:
    def test_success_below_limit(self) -> None:
        content = "# Title\n\nBody ünïcödé text."
        payload = success_response(content).to_payload()

        assert payload["content"] == [{"type": "text", "text": content}]
        assert payload["_meta"]["message"] == "Scraping successful"
        assert payload["_meta"]["success"] is True
        assert payload["is_error"] is False

    def test_success_above_limit_reports_total_size(self) -> None:
        response = success_response("y" * 150_000)

        assert len(response.content[0].text) == 100_000
        assert response.meta.message == "Content truncated due to size (total size: 150000 characters)"
        assert response.meta.content_size == 150_000
        assert response.is_error is False

    def test_custom_limit(self) -> None:
        response = success_response("abcdef", max_chars=4)
        assert response.content[0].text == "abcd"

    def test_error_response(self) -> None:
        payload = error_response("Failed to load https://x.invalid: name not resolved").to_payload()

        assert payload["is_error"] is True
        assert payload["content"] == [{"type": "text", "text": ""}]
        assert payload["_meta"]["message"] == "Error scraping webpage: Failed to load https://x.invalid: name not resolved"
        assert payload["_meta"]["success"] is False
        assert "content_size" not in payload["_meta"]


class TestScrapeWebpage:
    """The tool entry point around ``scrape``."""

    @pytest.mark.anyio
    async def test_success(self) -> None:
        with patch("pagedigest.tools.scrape", new=AsyncMock(return_value=ScrapeResult.success("# Hi"))) as scrape:
            response = await scrape_webpage("https://example.com", max_interaction_attempts=2, max_chars=10)

        options = scrape.call_args[0][0]
        assert options.url == "https://example.com"
        assert options.max_interaction_attempts == 2
        assert options.auto_interact is True
        assert response.content[0].text == "# Hi"
        assert response.is_error is False

    @pytest.mark.anyio
    async def test_failure_is_reported_in_band(self) -> None:
        failed = ScrapeResult.failure("Failed to parse the article content.")
        with patch("pagedigest.tools.scrape", new=AsyncMock(return_value=failed)):
            response = await scrape_webpage("https://example.com")

        assert response.is_error is True
        assert response.meta.message == "Error scraping webpage: Failed to parse the article content."

    @pytest.mark.anyio
    async def test_truncation_uses_settings_limit(self, monkeypatch) -> None:
        monkeypatch.setenv("PAGEDIGEST_OUTPUT__MAX_CONTENT_CHARS", "5")
        with patch("pagedigest.tools.scrape", new=AsyncMock(return_value=ScrapeResult.success("abcdefgh"))):
            response = await scrape_webpage("https://example.com")

        assert response.content[0].text == "abcde"
        assert "total size: 8 characters" in response.meta.message

    @pytest.mark.anyio
    @pytest.mark.parametrize("attempts", [-1, 11])
    async def test_out_of_range_attempts_are_reported_in_band(self, attempts: int) -> None:
        with patch("pagedigest.tools.scrape", new=AsyncMock()) as scrape:
            response = await scrape_webpage("https://example.com", max_interaction_attempts=attempts)

        scrape.assert_not_called()
        assert response.is_error is True
        assert response.content[0].text == ""
        assert response.meta.message.startswith("Error scraping webpage: Invalid arguments: max_interaction_attempts")

    @pytest.mark.anyio
    async def test_empty_url_is_reported_in_band(self) -> None:
        with patch("pagedigest.tools.scrape", new=AsyncMock()) as scrape:
            payload = (await scrape_webpage("")).to_payload()

        scrape.assert_not_called()
        assert payload["is_error"] is True
        assert "url" in payload["_meta"]["message"]

    def test_tool_name(self) -> None:
        assert TOOL_NAME == "scrape-webpage"
