"""Retrying provider wrapper.

Wraps any ``LLMProvider`` with exponential back-off so a rate limit or a
dropped connection does not cost an interaction attempt.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import httpx

from pagedigest.llm.base import LLMProvider, LLMResult

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


def _is_retryable(exc: Exception) -> bool:
    """Return True if *exc* looks like a transient error worth retrying."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return isinstance(exc, (httpx.TransportError, TimeoutError, ConnectionError))


class RetryingLLMProvider(LLMProvider):
    """Transparent retry wrapper around another provider.

    Args:
        delegate: The provider doing the real work.
        max_retries: Retries after the first attempt (0 passes straight through).
        base_delay: Initial back-off in seconds, doubled per retry.
        max_delay: Cap on a single back-off.
    """

    def __init__(
        self,
        delegate: LLMProvider,
        *,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
    ) -> None:
        self._delegate = delegate
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._max_delay = max_delay

    @property
    def delegate(self) -> LLMProvider:
        return self._delegate

    @property
    def supports_vision(self) -> bool:
        return self._delegate.supports_vision

    def _call_with_retry(self, func: Callable[..., LLMResult], *args, **kwargs) -> LLMResult:
        attempt = 0
        while True:
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                attempt += 1
                if attempt > self._max_retries or not _is_retryable(exc):
                    raise
                delay = min(self._base_delay * (2 ** (attempt - 1)), self._max_delay)
                logger.warning(
                    "LLM call failed (attempt %d/%d): %s; retrying in %.1fs",
                    attempt,
                    self._max_retries + 1,
                    type(exc).__name__,
                    delay,
                )
                time.sleep(delay)

    def chat_with_images(
        self,
        messages: list[dict],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResult:
        return self._call_with_retry(
            self._delegate.chat_with_images,
            messages,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=json_mode,
        )

    def check_connectivity(self) -> bool:
        return self._delegate.check_connectivity()

    def close(self) -> None:
        self._delegate.close()
