"""Browser launch profile and anti-detection patches.

Many cookie walls and bot checks look at ``navigator.webdriver`` and a few
other automation tells before deciding what to show.  ``apply_stealth_scripts``
patches those in every frame before any page script runs.

Usage::

    profile = build_browser_profile(settings.browser)
    browser = await pw.chromium.launch(**profile.launch_args)
    context = await browser.new_context(**profile.context_args)
    await apply_stealth_scripts(context)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from playwright.async_api import BrowserContext

    from pagedigest.settings.config import BrowserSettings

logger = logging.getLogger(__name__)

_SANDBOX_DISABLE_ARGS: list[str] = ["--no-sandbox", "--disable-setuid-sandbox"]

_STEALTH_SCRIPTS: str = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });

if (!window.chrome) window.chrome = {};
if (!window.chrome.runtime) window.chrome.runtime = {};

Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });

if (window.navigator.permissions) {
    const originalQuery = window.navigator.permissions.query;
    window.navigator.permissions.query = (parameters) =>
        parameters.name === 'notifications'
            ? Promise.resolve({ state: Notification.permission })
            : originalQuery(parameters);
}
"""


@dataclass
class BrowserProfile:
    """Playwright ``launch()`` and ``new_context()`` arguments for one session."""

    launch_args: dict[str, Any] = field(default_factory=dict)
    context_args: dict[str, Any] = field(default_factory=dict)
    apply_stealth: bool = True


def build_browser_profile(browser: BrowserSettings) -> BrowserProfile:
    """Translate browser settings into Playwright arguments."""
    profile = BrowserProfile(apply_stealth=browser.apply_stealth_scripts)

    profile.launch_args["headless"] = browser.headless
    if not browser.sandbox:
        profile.launch_args["args"] = list(_SANDBOX_DISABLE_ARGS)

    ctx = profile.context_args
    ctx["viewport"] = {"width": browser.viewport_width, "height": browser.viewport_height}
    if browser.user_agent:
        ctx["user_agent"] = browser.user_agent

    return profile


async def apply_stealth_scripts(context: BrowserContext) -> None:
    """Register the stealth patches on *context* so every new frame gets them.

    Must run before the first navigation.
    """
    await context.add_init_script(_STEALTH_SCRIPTS)
    logger.debug("Stealth scripts registered")
