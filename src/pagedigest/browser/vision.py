"""Vision classifier: screenshot in, one ``Action`` out.

The classifier is the untrusted half of the interaction loop.  Whatever the
model answers (or fails to answer), ``classify`` returns an ``Action`` and
never raises; anything unusable becomes ``ActionType.NONE`` with a reason.
"""

from __future__ import annotations

import asyncio
import json
import logging

from pagedigest.llm.base import LLMProvider
from pagedigest.models.action import Action, ActionType

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You look at a screenshot of a webpage and decide whether something is keeping \
a reader from the page content, and if so, the single action that removes it.

Things that block content:
- cookie or privacy consent banners
- CAPTCHA or "verify you are human" checks
- login walls and paywalls
- newsletter or notification sign-up pop-ups
- age verification gates
- interstitial or full-screen ads
- "Continue reading" / "Show more" buttons hiding the article
- any other overlay or modal covering the content

Respond with a JSON object only, using this schema:
{
    "action": "click" | "type" | "scroll" | "wait" | "none",
    "targetText": "visible text of the button or link to click",
    "targetSelector": "CSS selector of the element to click or type into",
    "inputText": "text to type (type only)",
    "scrollAmount": pixels to scroll down (scroll only, integer),
    "waitTime": milliseconds to wait (wait only, integer),
    "reason": "short explanation"
}

Rules:
- Return exactly ONE action.
- Prefer "targetText" with the exact visible label for clicks; use "targetSelector" \
only when the element has no readable text.
- Prefer accepting or dismissing a banner over configuring it.
- If the content is readable and nothing blocks it, return \
{"action": "none", "reason": "No interaction needed"}.
"""

USER_PROMPT = "Does anything on this page block the content? Respond with JSON only."


class VisionClassifier:
    """Ask a vision model which interaction, if any, unblocks the page.

    Args:
        llm: Provider with ``chat_with_images`` support.  Created from
            settings when omitted.
        max_tokens: Max output tokens per call.
    """

    def __init__(self, llm: LLMProvider | None = None, *, max_tokens: int | None = None) -> None:
        if llm is None:
            from pagedigest.llm.factory import create_llm_provider

            llm = create_llm_provider()
        self._llm = llm
        self._max_tokens = max_tokens

    async def classify(self, screenshot_b64: str, media_type: str = "image/png") -> Action:
        """Return the recommended action for a base64-encoded screenshot."""
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": USER_PROMPT},
                    {"type": "image", "media_type": media_type, "data": screenshot_b64},
                ],
            },
        ]

        raw_text = ""
        try:
            result = await asyncio.to_thread(
                self._llm.chat_with_images,
                messages,
                max_tokens=self._max_tokens,
                json_mode=True,
            )
            logger.debug(
                "Vision call: in=%d out=%d latency=%.0fms",
                result.input_tokens,
                result.output_tokens,
                result.latency_ms,
            )
            raw_text = result.content.strip()
            if not raw_text:
                logger.error("Vision model returned an empty response")
                return Action.none("Empty response from vision model")
            action = Action.from_payload(json.loads(_strip_code_fence(raw_text)))
        except json.JSONDecodeError as e:
            logger.error("Failed to parse vision response as JSON: %s (raw: %s)", e, raw_text[:500])
            return Action.none("Error parsing AI response")
        except NotImplementedError:
            logger.error("LLM provider %s does not support multimodal chat", type(self._llm).__name__)
            return Action.none("LLM provider does not support vision")
        except Exception as e:
            logger.error("Vision classification failed: %s", e)
            return Action.none(f"Vision classification failed: {e}")

        if action.action == ActionType.NONE:
            logger.info("Vision: no interaction (%s)", action.reason)
        else:
            logger.info("Vision: %s (%s)", action.describe(), action.reason)
        return action

    def close(self) -> None:
        """Release the underlying provider."""
        self._llm.close()


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence, if the model added one."""
    if not text.startswith("```"):
        return text
    inner = text.split("```")[1]
    if inner.startswith("json"):
        inner = inner[4:]
    return inner.strip()
