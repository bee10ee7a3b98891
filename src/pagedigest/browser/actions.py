"""Action executor for the interaction loop.

Translates an ``Action`` into browser effects.  Every handler reports a
bool and none of them raise: the action came from a probabilistic
classifier, so an unusable or failing action just means the attempt failed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from pagedigest.models.action import Action, ActionType
from pagedigest.models.results import ClickSummary, FrameMatch

if TYPE_CHECKING:
    from playwright.async_api import Frame

    from pagedigest.browser.driver import PageDriver

logger = logging.getLogger(__name__)

CLICKABLE_SELECTOR = "a, button"
DEFAULT_SELECTOR_TIMEOUT_MS = 5000


async def execute_action(
    page: PageDriver,
    action: Action,
    *,
    selector_timeout_ms: int = DEFAULT_SELECTOR_TIMEOUT_MS,
) -> bool:
    """Apply *action* to *page*.

    Returns:
        ``True`` when the effect was applied (or dispatched, for text
        clicks), ``False`` when it could not be applied.
    """
    handlers: dict[ActionType, Callable[[PageDriver, Action, int], Awaitable[bool]]] = {
        ActionType.CLICK: _do_click,
        ActionType.TYPE: _do_type,
        ActionType.SCROLL: _do_scroll,
        ActionType.WAIT: _do_wait,
    }

    handler = handlers.get(action.action)
    if handler is None:
        logger.debug("No action taken for %s", action.action)
        return False
    if not action.is_executable:
        logger.warning("Ignoring %s action with missing fields", action.action.value)
        return False

    try:
        return await handler(page, action, selector_timeout_ms)
    except Exception as e:
        logger.warning("Action %s failed: %s", action.describe(), e)
        return False


async def _do_click(page: PageDriver, action: Action, timeout_ms: int) -> bool:
    if action.target_text:
        # A click can navigate or remove the element before any confirmation,
        # so text clicks count as applied once dispatched.
        await click_all_matching(page, action.target_text)
        return True

    selector = action.target_selector or ""
    try:
        await page.wait_for_selector(selector, timeout_ms)
        await page.click(selector)
    except Exception as e:
        logger.warning("Could not click selector %r: %s", selector, e)
        return False
    logger.info("Clicked element %r", selector)
    return True


async def _do_type(page: PageDriver, action: Action, timeout_ms: int) -> bool:
    selector = action.target_selector or ""
    try:
        await page.wait_for_selector(selector, timeout_ms)
        await page.type(selector, action.input_text or "")
    except Exception as e:
        logger.warning("Could not type into selector %r: %s", selector, e)
        return False
    logger.info("Typed %d characters into %r", len(action.input_text or ""), selector)
    return True


async def _do_scroll(page: PageDriver, action: Action, timeout_ms: int) -> bool:
    await page.scroll_by(action.amount or 0)
    logger.info("Scrolled by %dpx", action.amount)
    return True


async def _do_wait(page: PageDriver, action: Action, timeout_ms: int) -> bool:
    await asyncio.sleep((action.duration_ms or 0) / 1000)
    logger.info("Waited %dms", action.duration_ms)
    return True


# ---------------------------------------------------------------------------
# Cross-frame text search
# ---------------------------------------------------------------------------


async def click_all_matching(page: PageDriver, text: str) -> ClickSummary:
    """Click every ``a``/``button`` whose text contains *text*, in every frame.

    Frames are scanned concurrently and matches inside a frame are clicked
    concurrently.  A frame that cannot be queried, or an element that cannot
    be clicked, is logged and skipped.  Never raises.
    """
    needle = text.lower()
    frames = page.frames()
    matches = await asyncio.gather(*(_click_in_frame(page, frame, needle) for frame in frames))

    summary = ClickSummary(frames=list(matches))
    for match in matches:
        if match.found:
            summary.frames_matched += 1
            summary.elements_clicked += match.count

    logger.info(
        "Text click %r: %d element(s) in %d of %d frame(s)",
        text,
        summary.elements_clicked,
        summary.frames_matched,
        len(frames),
    )
    for match in matches:
        if match.error:
            logger.debug("Frame %s skipped: %s", match.frame, match.error)
    return summary


async def _click_in_frame(page: PageDriver, frame: Frame, needle: str) -> FrameMatch:
    label = _frame_label(frame)
    try:
        handles = await page.query_all(frame, CLICKABLE_SELECTOR)
        matching = []
        for handle in handles:
            content = await handle.text_content()
            if content and needle in content.lower():
                matching.append(handle)
    except Exception as e:
        logger.warning("Error searching frame %s: %s", label, e)
        return FrameMatch(frame=label, error=str(e))

    if not matching:
        return FrameMatch(frame=label)

    results = await asyncio.gather(*(_click_handle(handle, label) for handle in matching))
    return FrameMatch(frame=label, found=True, count=sum(results))


async def _click_handle(handle, frame_label: str) -> bool:
    try:
        await handle.click()
    except Exception as e:
        logger.warning("Error clicking element in frame %s: %s", frame_label, e)
        return False
    return True


def _frame_label(frame: Frame) -> str:
    try:
        return frame.name or frame.url
    except Exception:
        return "<detached frame>"
