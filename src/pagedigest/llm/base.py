"""Abstract LLM provider interface."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field


@dataclass
class LLMResult:
    """Unified result from any provider call."""

    content: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: float = 0.0
    model: str = ""
    raw_response: dict = field(default_factory=dict)


class LLMProvider(abc.ABC):
    """Chat-completion backend used by the vision classifier.

    Multimodal messages carry structured content parts::

        [
            {"role": "system", "content": "..."},
            {"role": "user", "content": [
                {"type": "text", "text": "What blocks this page?"},
                {"type": "image", "media_type": "image/png", "data": "<base64>"},
            ]},
        ]

    Each provider converts the parts into its own wire format.
    """

    @abc.abstractmethod
    def chat_with_images(
        self,
        messages: list[dict],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResult:
        """Send a chat request whose messages may carry inline base64 images.

        Args:
            messages: System and user messages; user content may be a list
                of ``text`` and ``image`` parts.
            temperature: Override sampling temperature.
            max_tokens: Override max generation tokens.
            json_mode: Request JSON-only output when supported.

        Raises:
            NotImplementedError: If the backend cannot take images at all.
        """

    @property
    def supports_vision(self) -> bool:
        return False

    @abc.abstractmethod
    def check_connectivity(self) -> bool:
        """Return True if the provider is reachable and the model is available."""

    def close(self) -> None:
        """Release network resources. Override if needed."""
