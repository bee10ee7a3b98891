"""Bounded, vision-guided interaction loop.

Each attempt walks ``OBSERVING -> DECIDING -> ACTING -> SETTLING``:

* OBSERVING: screenshot the page (optionally persisted for diagnostics).
* DECIDING: ask the ``VisionClassifier`` for one action; ``none`` ends the
  loop at once.
* ACTING: run the action through the executor; failures only fail the
  attempt.
* SETTLING: after a successful action, pause so the page can re-render.

The loop stops when the classifier says nothing is left to do, or when the
attempt budget is spent.  Running out of attempts is a normal outcome; the
scraper extracts whatever is on the page either way.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from pagedigest.browser.actions import DEFAULT_SELECTOR_TIMEOUT_MS, execute_action
from pagedigest.models.action import Action, ActionType
from pagedigest.models.results import InteractionOutcome, LoopResult, LoopState

if TYPE_CHECKING:
    from pagedigest.browser.driver import PageDriver
    from pagedigest.browser.vision import VisionClassifier

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_MS = 2000


class InteractionLoop:
    """Drive the classifier and the executor over a bounded number of attempts.

    Args:
        classifier: Vision classifier deciding each action.
        settle_ms: Pause after a successful action.
        selector_timeout_ms: How long the executor waits for a selector.
        attempt_timeout_s: Deadline for one observe/decide/act cycle;
            ``None`` or ``0`` disables it.
        screenshot_dir: Where to persist screenshots; ``None`` disables it.
    """

    def __init__(
        self,
        classifier: VisionClassifier,
        *,
        settle_ms: int = DEFAULT_SETTLE_MS,
        selector_timeout_ms: int = DEFAULT_SELECTOR_TIMEOUT_MS,
        attempt_timeout_s: float | None = None,
        screenshot_dir: Path | None = None,
    ) -> None:
        self.classifier = classifier
        self.settle_ms = settle_ms
        self.selector_timeout_ms = selector_timeout_ms
        self.attempt_timeout_s = attempt_timeout_s or None
        self.screenshot_dir = screenshot_dir
        self.state = LoopState.DONE

    async def run(self, page: PageDriver, max_attempts: int) -> LoopResult:
        """Run attempts until the classifier returns ``none`` or the budget is spent."""
        result = LoopResult()
        if max_attempts <= 0:
            logger.info("Interaction skipped (max_attempts=%d)", max_attempts)
            self.state = LoopState.DONE
            return result

        while result.attempts_used < max_attempts:
            result.attempts_used += 1
            logger.info("Interaction attempt %d/%d", result.attempts_used, max_attempts)

            outcome = await self._bounded_attempt(page)
            result.outcomes.append(outcome)

            if not outcome.attempted:
                break

            if outcome.succeeded:
                result.any_interaction_performed = True
                self.state = LoopState.SETTLING
                await asyncio.sleep(self.settle_ms / 1000)

        self.state = LoopState.DONE
        logger.info(
            "Interaction finished: performed=%s attempts=%d/%d",
            result.any_interaction_performed,
            result.attempts_used,
            max_attempts,
        )
        return result

    async def _bounded_attempt(self, page: PageDriver) -> InteractionOutcome:
        """Run one attempt under the optional deadline.

        Returns an outcome with ``attempted=False`` only when the classifier
        decided that no interaction is needed.
        """
        if self.attempt_timeout_s is None:
            return await self._attempt(page)
        try:
            return await asyncio.wait_for(self._attempt(page), timeout=self.attempt_timeout_s)
        except asyncio.TimeoutError:
            logger.warning("Interaction attempt timed out after %.1fs in state %s", self.attempt_timeout_s, self.state.value)
            return InteractionOutcome(
                attempted=True,
                succeeded=False,
                action_taken=Action.none(f"Attempt timed out after {self.attempt_timeout_s:g}s"),
            )

    async def _attempt(self, page: PageDriver) -> InteractionOutcome:
        self.state = LoopState.OBSERVING
        try:
            png = await page.screenshot()
        except Exception as e:
            logger.warning("Screenshot failed: %s", e)
            return InteractionOutcome(attempted=True, succeeded=False, action_taken=Action.none(f"Screenshot failed: {e}"))
        self._persist_screenshot(png)

        self.state = LoopState.DECIDING
        action = await self.classifier.classify(base64.b64encode(png).decode("ascii"))
        if action.action == ActionType.NONE:
            return InteractionOutcome(attempted=False, succeeded=False, action_taken=action)

        self.state = LoopState.ACTING
        try:
            succeeded = await execute_action(page, action, selector_timeout_ms=self.selector_timeout_ms)
        except Exception as e:
            logger.warning("Executor error for %s: %s", action.describe(), e)
            succeeded = False
        return InteractionOutcome(attempted=True, succeeded=succeeded, action_taken=action)

    def _persist_screenshot(self, png: bytes) -> None:
        """Write the screenshot for diagnostics; failures are only logged."""
        if self.screenshot_dir is None:
            return
        path = self.screenshot_dir / f"screenshot-interaction-{int(time.time() * 1000)}.png"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(png)
            logger.debug("Saved screenshot to %s", path)
        except OSError as e:
            logger.warning("Could not save screenshot to %s: %s", path, e)
