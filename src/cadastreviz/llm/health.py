"""Health check for the configured LLM provider."""

from __future__ import annotations

from cadastreviz.core.config import LLMConfig
from cadastreviz.core.health import timed_probe
from cadastreviz.core.types import HealthStatus
from cadastreviz.llm.client import create_llm_client


async def check_llm_health(config: LLMConfig) -> HealthStatus:
    """Probe the LLM backend and return a HealthStatus."""

    client = create_llm_client(config)
    try:
        return await timed_probe(
            f"llm:{config.provider}",
            client.is_available,
            {"base_url": config.base_url, "model": config.model},
        )
    finally:
        await client.close()
