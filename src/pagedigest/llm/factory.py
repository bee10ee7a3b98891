"""Factory for creating the vision provider from settings."""

from __future__ import annotations

import logging
import os

from pagedigest.llm.base import LLMProvider

logger = logging.getLogger(__name__)


def create_llm_provider(provider: str | None = None, *, model: str | None = None) -> LLMProvider:
    """Create a provider from settings or an explicit provider name.

    The result is wrapped in ``RetryingLLMProvider``.

    Args:
        provider: Override provider name (``openai`` or ``ollama``).
            If None, reads ``get_settings().llm.provider``.
        model: Override model name.

    Raises:
        ValueError: If the provider name is not recognized.
    """
    from pagedigest.settings import get_settings

    llm = get_settings().llm
    provider_name = (provider or llm.provider).lower().strip()
    model_name = model or llm.model

    base: LLMProvider

    if provider_name == "openai":
        from pagedigest.llm.openai_provider import OpenAIProvider

        api_key = llm.api_key or os.getenv("OPENAI_API_KEY", "")
        if not api_key:
            logger.warning("No API key configured for the openai provider; requests will be rejected")
        base = OpenAIProvider(
            api_key=api_key,
            model=model_name,
            base_url=llm.api_base_url,
            temperature=llm.temperature,
            max_tokens=llm.max_tokens,
            image_detail=llm.image_detail,
            timeout_s=llm.timeout_s,
        )

    elif provider_name == "ollama":
        from pagedigest.llm.ollama_provider import OllamaProvider

        base = OllamaProvider(
            base_url=llm.ollama_base_url,
            model=model_name,
            temperature=llm.temperature,
            max_tokens=llm.max_tokens,
            timeout_s=llm.timeout_s,
        )

    else:
        raise ValueError(f"Unknown LLM provider: {provider_name!r}. Supported: openai, ollama")

    logger.info("Created LLM provider: provider=%s model=%s", provider_name, model_name)

    from pagedigest.llm.retry import RetryingLLMProvider

    return RetryingLLMProvider(base, max_retries=llm.max_retries, base_delay=1.0)
