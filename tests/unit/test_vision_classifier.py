"""Unit tests for the vision classifier."""

from __future__ import annotations

import httpx
import pytest

from pagedigest.browser.vision import SYSTEM_PROMPT, VisionClassifier, _strip_code_fence
from pagedigest.llm.base import LLMResult
from pagedigest.models.action import ActionType


def _result(content: str) -> LLMResult:
    return LLMResult(content=content, input_tokens=900, output_tokens=30, model="mock")


class TestClassify:
    """Responses from the model are always turned into an Action."""

    @pytest.mark.anyio
    async def test_sends_screenshot_as_image_part(self, mock_llm_provider) -> None:
        classifier = VisionClassifier(llm=mock_llm_provider, max_tokens=321)

        await classifier.classify("aGVsbG8=")

        mock_llm_provider.chat_with_images.assert_called_once()
        messages = mock_llm_provider.chat_with_images.call_args[0][0]
        kwargs = mock_llm_provider.chat_with_images.call_args[1]
        assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
        image = messages[1]["content"][1]
        assert image == {"type": "image", "media_type": "image/png", "data": "aGVsbG8="}
        assert kwargs["json_mode"] is True
        assert kwargs["max_tokens"] == 321

    @pytest.mark.anyio
    async def test_click_response(self, mock_llm_provider) -> None:
        mock_llm_provider.chat_with_images.return_value = _result(
            '{"action": "click", "targetText": "Accept all", "reason": "Cookie consent banner"}'
        )
        action = await VisionClassifier(llm=mock_llm_provider).classify("x")
        assert action.action == ActionType.CLICK
        assert action.target_text == "Accept all"

    @pytest.mark.anyio
    async def test_fenced_json_is_accepted(self, mock_llm_provider) -> None:
        mock_llm_provider.chat_with_images.return_value = _result(
            '```json\n{"action": "scroll", "scrollAmount": 500, "reason": "More content below"}\n```'
        )
        action = await VisionClassifier(llm=mock_llm_provider).classify("x")
        assert action.action == ActionType.SCROLL
        assert action.amount == 500

    @pytest.mark.anyio
    async def test_none_response(self, mock_llm_provider) -> None:
        action = await VisionClassifier(llm=mock_llm_provider).classify("x")
        assert action.action == ActionType.NONE
        assert action.reason == "No interaction needed"

    @pytest.mark.anyio
    async def test_empty_response_becomes_none(self, mock_llm_provider) -> None:
        mock_llm_provider.chat_with_images.return_value = _result("   ")
        action = await VisionClassifier(llm=mock_llm_provider).classify("x")
        assert action.action == ActionType.NONE
        assert action.reason == "Empty response from vision model"

    @pytest.mark.anyio
    async def test_malformed_json_becomes_none(self, mock_llm_provider) -> None:
        mock_llm_provider.chat_with_images.return_value = _result("I think you should click Accept.")
        action = await VisionClassifier(llm=mock_llm_provider).classify("x")
        assert action.action == ActionType.NONE
        assert action.reason == "Error parsing AI response"

    @pytest.mark.anyio
    async def test_provider_error_becomes_none(self, mock_llm_provider) -> None:
        mock_llm_provider.chat_with_images.side_effect = httpx.ConnectError("refused")
        action = await VisionClassifier(llm=mock_llm_provider).classify("x")
        assert action.action == ActionType.NONE
        assert "refused" in action.reason

    @pytest.mark.anyio
    async def test_provider_without_vision_becomes_none(self, mock_llm_provider) -> None:
        mock_llm_provider.chat_with_images.side_effect = NotImplementedError("no vision")
        action = await VisionClassifier(llm=mock_llm_provider).classify("x")
        assert action.action == ActionType.NONE
        assert action.reason == "LLM provider does not support vision"


class TestStripCodeFence:
    def test_plain_text_unchanged(self) -> None:
        assert _strip_code_fence('{"action": "none"}') == '{"action": "none"}'

    def test_json_fence(self) -> None:
        assert _strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self) -> None:
        assert _strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'
