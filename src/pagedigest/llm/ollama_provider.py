"""Ollama provider for local/self-hosted vision models.

Images are sent through Ollama's native ``images`` message field.  Models
that are not known to accept images get a text-only request instead, which
leaves the classifier without a screenshot; configure a vision model such
as ``gemma3`` or ``llava`` for real use.
"""

from __future__ import annotations

import logging
import time

import httpx

from pagedigest.llm.base import LLMProvider, LLMResult

logger = logging.getLogger(__name__)

# Model name prefixes known to accept images.
_VISION_MODEL_PREFIXES: tuple[str, ...] = (
    "gemma3",
    "llava",
    "bakllava",
    "llama3.2-vision",
    "qwen2-vl",
    "qwen2.5vl",
    "qwen3-vl",
    "moondream",
    "minicpm-v",
)


class OllamaProvider(LLMProvider):
    """LLM provider backed by a local Ollama server (``/api/chat``).

    Args:
        base_url: Ollama server URL.
        model: Model name, e.g. ``gemma3``.
        temperature: Default sampling temperature.
        max_tokens: Default max generation tokens (``num_predict``).
        timeout_s: HTTP timeout in seconds.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "gemma3",
        temperature: float = 0.0,
        max_tokens: int = 500,
        timeout_s: float = 120.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = httpx.Client(timeout=timeout_s)

    @property
    def supports_vision(self) -> bool:
        model_lower = self.model.lower()
        return any(model_lower.startswith(prefix) for prefix in _VISION_MODEL_PREFIXES)

    def chat_with_images(
        self,
        messages: list[dict],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResult:
        """Send a multimodal chat request, or a text-only one for non-vision models."""
        keep_images = self.supports_vision
        if not keep_images:
            logger.warning("Model %s is not vision-capable; sending text only", self.model)
        converted = [self._convert_message(msg, keep_images=keep_images) for msg in messages]
        return self._post_chat(converted, temperature=temperature, max_tokens=max_tokens, json_mode=json_mode)

    def check_connectivity(self) -> bool:
        """Return ``True`` if Ollama is reachable and the configured model is pulled."""
        try:
            resp = self._client.get(f"{self.base_url}/api/tags")
            if resp.status_code != 200:
                return False
            models = [m.get("name", "") for m in resp.json().get("models", [])]
            return any(m.startswith(self.model.split(":")[0]) for m in models)
        except httpx.HTTPError:
            return False

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _post_chat(
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
            "stream": False,
            "options": {
                "temperature": temperature if temperature is not None else self.temperature,
                "num_predict": max_tokens if max_tokens is not None else self.max_tokens,
            },
        }
        if json_mode:
            payload["format"] = "json"

        start = time.monotonic()
        try:
            resp = self._client.post(f"{self.base_url}/api/chat", json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error("Ollama HTTP error: %s %s", e.response.status_code, e.response.text[:500])
            raise
        except httpx.ConnectError:
            logger.error("Cannot connect to Ollama at %s; is it running?", self.base_url)
            raise

        return LLMResult(
            content=body.get("message", {}).get("content", ""),
            input_tokens=body.get("prompt_eval_count", 0),
            output_tokens=body.get("eval_count", 0),
            latency_ms=(time.monotonic() - start) * 1000,
            model=self.model,
            raw_response=body,
        )

    @staticmethod
    def _convert_message(msg: dict, *, keep_images: bool) -> dict:
        """Flatten structured parts into ``content`` text plus an ``images`` list."""
        role = msg.get("role", "user")
        content = msg.get("content")
        if isinstance(content, str):
            return {"role": role, "content": content}

        text_parts: list[str] = []
        images: list[str] = []
        for part in content or []:
            if not isinstance(part, dict):
                continue
            if part.get("type") == "text":
                text_parts.append(part["text"])
            elif part.get("type") == "image" and keep_images:
                images.append(part["data"])

        entry: dict = {"role": role, "content": "\n".join(text_parts)}
        if images:
            entry["images"] = images
        return entry
