"""Ollama provider using the /api/generate endpoint with a JSON schema format."""

from __future__ import annotations

from typing import Any

import httpx

from cadastreviz.core.config import LLMConfig
from cadastreviz.llm.client import LLMClient
from cadastreviz.llm.transport import post_json

_CONTEXT_TOKENS = 8192


class OllamaClient(LLMClient):
    """Talks to a local Ollama instance."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
        )

    async def generate_structured(
        self,
        prompt: str,
        schema: dict[str, Any],
        *,
        system_prompt: str | None = None,
        temperature: float = 0.0,
    ) -> str:
        payload: dict[str, Any] = {
            "model": self.config.model,
            "prompt": prompt,
            "format": schema,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_ctx": _CONTEXT_TOKENS,
                "num_predict": self.config.max_tokens,
            },
        }
        if system_prompt is not None:
            payload["system"] = system_prompt
        if self.config.top_p is not None:
            payload["options"]["top_p"] = self.config.top_p

        data = await post_json(
            self._http, "/api/generate", payload, max_retries=self.config.max_retries
        )
        return data["response"]

    async def is_available(self) -> bool:
        try:
            r = await self._http.get("/api/tags")
            return r.status_code == 200
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        await self._http.aclose()
