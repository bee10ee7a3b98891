"""OpenAI-compatible chat-completions provider.

Works against any endpoint that speaks the ``/chat/completions`` protocol
(OpenAI, Azure OpenAI gateways, Groq, vLLM, LiteLLM).  Images are sent as
``image_url`` parts carrying a base64 data URL.
"""

from __future__ import annotations

import logging
import time

import httpx

from pagedigest.llm.base import LLMProvider, LLMResult

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """LLM provider backed by an OpenAI-compatible HTTP API.

    Args:
        api_key: Bearer token for the endpoint.
        model: Model name (e.g. ``gpt-4.1``).
        base_url: API root, up to and including the version segment.
        temperature: Default sampling temperature.
        max_tokens: Default max generation tokens.
        image_detail: ``detail`` hint for image parts (``low``, ``high``, ``auto``).
        timeout_s: HTTP timeout in seconds.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4.1",
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.0,
        max_tokens: int = 500,
        image_detail: str = "high",
        timeout_s: float = 120.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.image_detail = image_detail
        self._client = httpx.Client(
            timeout=timeout_s,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

    @property
    def supports_vision(self) -> bool:
        return True

    def chat_with_images(
        self,
        messages: list[dict],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResult:
        """Send a multimodal chat completion request.

        Structured ``image`` parts are rewritten as ``image_url`` parts;
        plain string contents are passed through unchanged.
        """
        converted = [self._convert_message(msg) for msg in messages]
        return self._complete(converted, temperature=temperature, max_tokens=max_tokens, json_mode=json_mode)

    def check_connectivity(self) -> bool:
        """Return ``True`` if the endpoint answers ``/models`` and lists the configured model."""
        try:
            resp = self._client.get(f"{self.base_url}/models")
            if resp.status_code != 200:
                return False
            ids = [m.get("id", "") for m in resp.json().get("data", [])]
            return not ids or self.model in ids
        except httpx.HTTPError:
            return False

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _complete(
        self,
        messages: list[dict],
        *,
        temperature: float | None,
        max_tokens: int | None,
        json_mode: bool,
    ) -> LLMResult:
        payload: dict = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature if temperature is not None else self.temperature,
            "max_tokens": max_tokens if max_tokens is not None else self.max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        start = time.monotonic()
        try:
            resp = self._client.post(f"{self.base_url}/chat/completions", json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error("Chat completions HTTP error: %s %s", e.response.status_code, e.response.text[:500])
            raise
        except httpx.ConnectError:
            logger.error("Cannot connect to chat completions endpoint at %s", self.base_url)
            raise

        latency_ms = (time.monotonic() - start) * 1000
        choices = body.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content") or ""
        usage = body.get("usage") or {}

        return LLMResult(
            content=content,
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
            latency_ms=latency_ms,
            model=body.get("model", self.model),
            raw_response=body,
        )

    def _convert_message(self, msg: dict) -> dict:
        content = msg.get("content")
        if isinstance(content, str):
            return {"role": msg.get("role", "user"), "content": content}

        parts: list[dict] = []
        for part in content or []:
            if not isinstance(part, dict):
                continue
            if part.get("type") == "text":
                parts.append({"type": "text", "text": part["text"]})
            elif part.get("type") == "image":
                media_type = part.get("media_type", "image/png")
                parts.append({
                    "type": "image_url",
                    "image_url": {
                        "url": f"data:{media_type};base64,{part['data']}",
                        "detail": self.image_detail,
                    },
                })
        return {"role": msg.get("role", "user"), "content": parts}
