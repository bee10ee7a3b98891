"""Page navigation with automatic wait-strategy fallback.

Pages with long-polling analytics, chat widgets or open WebSockets may never
reach ``networkidle``.  ``resilient_goto`` tries the requested strategy
first and steps down to weaker ones on timeout, so a noisy page still gets
scraped.
"""

from __future__ import annotations

import logging
from typing import Literal

from playwright.async_api import Error as PlaywrightError, Page, Response, TimeoutError as PlaywrightTimeout

from pagedigest.exceptions import NavigationError

logger = logging.getLogger(__name__)

# Chromium network errors that a weaker wait strategy cannot fix.
_NON_RETRYABLE_ERRORS: tuple[str, ...] = (
    "ERR_NAME_NOT_RESOLVED",
    "ERR_CONNECTION_REFUSED",
    "ERR_CONNECTION_RESET",
    "ERR_CONNECTION_CLOSED",
    "ERR_SSL_PROTOCOL_ERROR",
    "ERR_CERT_AUTHORITY_INVALID",
    "ERR_CERT_COMMON_NAME_INVALID",
    "ERR_ADDRESS_UNREACHABLE",
    "ERR_INTERNET_DISCONNECTED",
)

WaitUntil = Literal["commit", "domcontentloaded", "load", "networkidle"]

_FALLBACK_STRATEGY: list[WaitUntil] = ["networkidle", "load", "domcontentloaded"]


async def resilient_goto(
    page: Page,
    url: str,
    *,
    timeout_ms: int = 30_000,
    wait_until: WaitUntil = "networkidle",
) -> Response | None:
    """Navigate to *url*, stepping down the wait strategy on timeout.

    Args:
        page: Playwright page.
        url: Target URL.
        timeout_ms: Timeout per strategy in milliseconds.
        wait_until: Preferred initial wait strategy.

    Returns:
        The main-frame ``Response``, or ``None``.

    Raises:
        NavigationError: On DNS, connection or certificate failures.
        PlaywrightTimeout: If every strategy times out.
    """
    last_error: PlaywrightTimeout | None = None
    for strategy in _build_fallback_chain(wait_until):
        try:
            logger.debug("goto %s (wait_until=%s, timeout=%dms)", url, strategy, timeout_ms)
            return await page.goto(url, wait_until=strategy, timeout=timeout_ms)
        except PlaywrightError as exc:
            error_msg = str(exc)
            for pattern in _NON_RETRYABLE_ERRORS:
                if pattern in error_msg:
                    reason = pattern.replace("ERR_", "").replace("_", " ").lower()
                    logger.warning("Navigation to %s failed (non-retryable): %s", url, pattern)
                    raise NavigationError(url, reason) from exc
            if not isinstance(exc, PlaywrightTimeout):
                raise
            logger.warning("Navigation to %s timed out with wait_until=%s; trying a weaker strategy", url, strategy)
            last_error = exc

    raise last_error  # type: ignore[misc]


def _build_fallback_chain(preferred: WaitUntil) -> list[WaitUntil]:
    """Return the fallback chain starting from *preferred*."""
    if preferred in _FALLBACK_STRATEGY:
        return _FALLBACK_STRATEGY[_FALLBACK_STRATEGY.index(preferred):]
    return [preferred, *_FALLBACK_STRATEGY]
