"""Thin async adapter over a Playwright ``Page``.

The interaction loop and the action executor only talk to ``PageDriver``,
which keeps the Playwright surface they depend on small and easy to fake
in tests.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pagedigest.browser.navigation import resilient_goto

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Frame, Page, Response

logger = logging.getLogger(__name__)

# Main-content containers, most specific first; ``body`` is the fallback.
MAIN_CONTENT_SELECTORS: tuple[str, ...] = ("main", "article", ".content", "#content")

_MAIN_CONTENT_JS = """
(selectors) => {
    for (const selector of selectors) {
        const el = document.querySelector(selector);
        if (el) return el.innerHTML;
    }
    return document.body ? document.body.innerHTML : "";
}
"""


class PageDriver:
    """Browser capabilities consumed by the scraper.

    Args:
        page: An async Playwright page owned by the current scrape.
        navigation_timeout_ms: Per-strategy timeout for ``navigate``.
    """

    def __init__(self, page: Page, *, navigation_timeout_ms: int = 30_000) -> None:
        self.page = page
        self.navigation_timeout_ms = navigation_timeout_ms

    @property
    def url(self) -> str:
        return self.page.url

    async def navigate(self, url: str, *, wait_for_network_idle: bool = True) -> Response | None:
        """Load *url*, waiting for network idle or just DOM content."""
        wait_until = "networkidle" if wait_for_network_idle else "domcontentloaded"
        return await resilient_goto(self.page, url, timeout_ms=self.navigation_timeout_ms, wait_until=wait_until)

    async def screenshot(self) -> bytes:
        """Capture the current viewport as PNG bytes."""
        return await self.page.screenshot(type="png")

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self.page.evaluate(script, arg)

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> None:
        await self.page.wait_for_selector(selector, timeout=timeout_ms)

    async def click(self, selector: str) -> None:
        await self.page.click(selector)

    async def type(self, selector: str, text: str) -> None:
        await self.page.locator(selector).first.press_sequentially(text)

    async def scroll_by(self, amount: int) -> None:
        await self.page.evaluate("(dy) => window.scrollBy(0, dy)", amount)

    def frames(self) -> list[Frame]:
        """All frames of the page, main frame first."""
        return list(self.page.frames)

    @staticmethod
    async def query_all(frame: Frame, selector: str) -> list[ElementHandle]:
        return await frame.query_selector_all(selector)

    async def main_content_html(self) -> str:
        """Inner HTML of the first main-content container, else of ``body``."""
        return await self.page.evaluate(_MAIN_CONTENT_JS, list(MAIN_CONTENT_SELECTORS))
