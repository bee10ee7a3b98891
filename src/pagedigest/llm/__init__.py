"""Vision model providers for pagedigest.

``openai`` (any OpenAI-compatible chat-completions endpoint) and ``ollama``
(local) backends share the ``LLMProvider`` interface.
"""

from pagedigest.llm.base import LLMProvider, LLMResult
from pagedigest.llm.factory import create_llm_provider

__all__ = ["LLMProvider", "LLMResult", "create_llm_provider"]
