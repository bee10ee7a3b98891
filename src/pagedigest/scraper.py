"""Scrape orchestration: load, interact, extract, render.

``scrape`` is the only entry point that touches the browser.  Each call owns
its own browser session, which is released on every exit path, and every
failure is reported through ``ScrapeResult.error`` rather than raised.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pagedigest.browser.interaction import InteractionLoop
from pagedigest.browser.session import browser_session
from pagedigest.browser.vision import VisionClassifier
from pagedigest.content.processor import process_html_content
from pagedigest.models.results import ScrapeOptions, ScrapeResult

if TYPE_CHECKING:
    from pagedigest.browser.driver import PageDriver
    from pagedigest.settings.config import Settings

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"


def build_interaction_loop(settings: Settings, classifier: VisionClassifier | None = None) -> InteractionLoop:
    """Create an ``InteractionLoop`` configured from *settings*."""
    interaction = settings.interaction
    diagnostics = settings.diagnostics
    return InteractionLoop(
        classifier or VisionClassifier(),
        settle_ms=interaction.settle_ms,
        selector_timeout_ms=interaction.selector_timeout_ms,
        attempt_timeout_s=interaction.attempt_timeout_s,
        screenshot_dir=Path(diagnostics.screenshot_dir) if diagnostics.save_screenshots else None,
    )


async def scrape_page(
    page: PageDriver,
    options: ScrapeOptions,
    *,
    settings: Settings,
    loop: InteractionLoop | None = None,
) -> str:
    """Run navigation, interaction and extraction on an open page.

    Interaction runs only when ``options.auto_interact`` is set and a *loop*
    is given.

    Raises:
        NavigationError: If the page cannot be loaded.
        NoArticleFound: If no article content can be extracted.
    """
    logger.info("Navigating to %s (network idle=%s)", options.url, options.wait_for_network_idle)
    await page.navigate(options.url, wait_for_network_idle=options.wait_for_network_idle)
    await asyncio.sleep(settings.interaction.post_load_delay_ms / 1000)

    if options.auto_interact and loop is not None:
        result = await loop.run(page, options.max_interaction_attempts)
        if result.any_interaction_performed:
            logger.info("Page interactions performed in %d attempt(s)", result.attempts_used)

    html = await page.main_content_html()
    return process_html_content(html)


async def scrape(
    options: ScrapeOptions,
    *,
    settings: Settings | None = None,
    classifier: VisionClassifier | None = None,
) -> ScrapeResult:
    """Scrape ``options.url`` and return its content as Markdown.

    Never raises: navigation, session and extraction failures become
    ``ScrapeResult.error``.
    """
    if settings is None:
        from pagedigest.settings import get_settings

        settings = get_settings()

    owned: VisionClassifier | None = None
    try:
        loop = None
        if options.auto_interact and options.max_interaction_attempts > 0:
            if classifier is None:
                classifier = owned = VisionClassifier()
            loop = build_interaction_loop(settings, classifier)
        async with browser_session(settings) as page:
            markdown = await scrape_page(page, options, settings=settings, loop=loop)
    except Exception as e:
        message = str(e) or UNKNOWN_ERROR_MESSAGE
        logger.error("Scrape of %s failed: %s", options.url, message)
        return ScrapeResult.failure(message)
    finally:
        if owned is not None:
            owned.close()

    return ScrapeResult.success(markdown)
