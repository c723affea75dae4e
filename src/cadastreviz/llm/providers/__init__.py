"""Provider registry for LLM backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cadastreviz.llm.client import LLMClient

from cadastreviz.llm.providers.gemini import GeminiClient
from cadastreviz.llm.providers.ollama import OllamaClient
from cadastreviz.llm.providers.openai_compat import OpenAICompatClient

PROVIDER_REGISTRY: dict[str, type[LLMClient]] = {
    "ollama": OllamaClient,
    "openai": OpenAICompatClient,
    "vllm": OpenAICompatClient,
    "gemini": GeminiClient,
}

__all__ = ["PROVIDER_REGISTRY", "GeminiClient", "OllamaClient", "OpenAICompatClient"]
