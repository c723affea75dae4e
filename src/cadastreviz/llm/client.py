"""Abstract LLM client interface and factory function."""

from __future__ import annotations

import abc
from typing import Any

from cadastreviz.core.config import LLMConfig


class LLMClient(abc.ABC):
    """Abstract base class for LLM providers.

    Parcel extraction only ever needs one thing from a model: a JSON answer
    constrained to a schema.
    """

    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    @abc.abstractmethod
    async def generate_structured(
        self,
        prompt: str,
        schema: dict[str, Any],
        *,
        system_prompt: str | None = None,
        temperature: float = 0.0,
    ) -> str:
        """Generate a completion constrained to a JSON schema.

        Returns the raw JSON text produced by the model; decoding is left
        to the caller so it can report malformed output itself.
        """

    @abc.abstractmethod
    async def is_available(self) -> bool:
        """Return True if the provider is reachable."""

    async def close(self) -> None:
        """Clean up resources. Override if the provider holds connections."""


def create_llm_client(config: LLMConfig) -> LLMClient:
    """Factory: select and instantiate an LLM provider based on config.provider."""

    from cadastreviz.llm.providers import PROVIDER_REGISTRY

    provider = config.provider.lower()
    if provider not in PROVIDER_REGISTRY:
        available = ", ".join(sorted(PROVIDER_REGISTRY))
        raise ValueError(
            f"Unknown LLM provider {config.provider!r}. "
            f"Available: {available}"
        )

    return PROVIDER_REGISTRY[provider](config)
