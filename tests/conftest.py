"""pagedigest test configuration — shared fixtures for unit tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

FIXTURES_DIR = Path(__file__).parent / "fixtures"
PAGES_DIR = FIXTURES_DIR / "pages"


# ---------------------------------------------------------------------------
# Async backend
# ---------------------------------------------------------------------------


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings LRU cache between tests."""
    from pagedigest.settings.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def fast_settings(tmp_path: Path):
    """Settings with every pause disabled and screenshots under *tmp_path*."""
    from pagedigest.settings.config import Settings

    settings = Settings()
    settings.interaction.settle_ms = 0
    settings.interaction.post_load_delay_ms = 0
    settings.interaction.attempt_timeout_s = 0
    settings.diagnostics.save_screenshots = False
    settings.diagnostics.screenshot_dir = str(tmp_path / "screenshots")
    return settings


# ---------------------------------------------------------------------------
# Mock LLM
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_llm_provider():
    """Return a ``MagicMock`` conforming to the ``LLMProvider`` interface.

    Default behaviour: the vision call answers with a ``none`` action so
    loop and scraper tests can run without a real model.
    """
    from pagedigest.llm.base import LLMProvider, LLMResult

    mock = MagicMock(spec=LLMProvider)
    mock.check_connectivity.return_value = True
    mock.supports_vision = True
    mock.chat_with_images.return_value = LLMResult(
        content='{"action": "none", "reason": "No interaction needed"}',
        input_tokens=900,
        output_tokens=20,
        model="mock",
    )
    mock.close.return_value = None
    return mock


# ---------------------------------------------------------------------------
# Fake page
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_page():
    """A ``PageDriver`` stand-in with async methods mocked."""
    from pagedigest.browser.driver import PageDriver

    page = MagicMock(spec=PageDriver)
    page.url = "https://example.com/article"
    page.navigate = AsyncMock(return_value=None)
    page.screenshot = AsyncMock(return_value=b"\x89PNG\r\n\x1a\nfake")
    page.evaluate = AsyncMock(return_value=None)
    page.wait_for_selector = AsyncMock(return_value=None)
    page.click = AsyncMock(return_value=None)
    page.type = AsyncMock(return_value=None)
    page.scroll_by = AsyncMock(return_value=None)
    page.query_all = AsyncMock(return_value=[])
    page.main_content_html = AsyncMock(return_value="")
    page.frames.return_value = []
    return page


# ---------------------------------------------------------------------------
# HTML page fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def article_with_code_html() -> str:
    """Blog post with prose, a deeply nested code block and a sidebar."""
    return (PAGES_DIR / "article_with_code.html").read_text(encoding="utf-8")


@pytest.fixture()
def article_with_table_html() -> str:
    """Documentation page with a pipe-able table."""
    return (PAGES_DIR / "article_with_table.html").read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that require a real browser or network access")
    config.addinivalue_line("markers", "slow: marks tests that take more than a few seconds")
