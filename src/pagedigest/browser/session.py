"""Per-scrape browser session.

Each scrape owns one Playwright instance, one browser, one context and one
page.  ``browser_session`` releases all of them on every exit path.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from playwright.async_api import Error as PlaywrightError, async_playwright

from pagedigest.browser.driver import PageDriver
from pagedigest.browser.stealth import apply_stealth_scripts, build_browser_profile
from pagedigest.exceptions import ScrapeSessionError

if TYPE_CHECKING:
    from pagedigest.settings.config import Settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def browser_session(settings: Settings) -> AsyncIterator[PageDriver]:
    """Launch Chromium, open a page and yield it wrapped in a ``PageDriver``.

    Raises:
        ScrapeSessionError: If the browser cannot be launched.
    """
    profile = build_browser_profile(settings.browser)

    async with async_playwright() as pw:
        try:
            browser = await pw.chromium.launch(**profile.launch_args)
        except PlaywrightError as exc:
            raise ScrapeSessionError(f"Failed to launch browser: {exc}") from exc

        try:
            context = await browser.new_context(**profile.context_args)
            if profile.apply_stealth:
                await apply_stealth_scripts(context)
            page = await context.new_page()
            logger.debug("Browser session started (headless=%s)", profile.launch_args.get("headless"))
            yield PageDriver(page, navigation_timeout_ms=settings.browser.timeout_ms)
        finally:
            await browser.close()
            logger.debug("Browser session closed")
