"""OpenAI-compatible provider (works with vLLM, llama-cpp-python, etc.)."""

from __future__ import annotations

from typing import Any

import httpx

from cadastreviz.core.config import LLMConfig
from cadastreviz.llm.client import LLMClient
from cadastreviz.llm.transport import post_json


class OpenAICompatClient(LLMClient):
    """Talks to any server exposing /v1/chat/completions with json_schema output."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        headers: dict[str, str] = {}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            headers=headers,
        )

    async def generate_structured(
        self,
        prompt: str,
        schema: dict[str, Any],
        *,
        system_prompt: str | None = None,
        temperature: float = 0.0,
    ) -> str:
        messages: list[dict[str, str]] = []
        if system_prompt is not None:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "temperature": temperature,
            "stream": False,
            "max_tokens": self.config.max_tokens,
            "response_format": {
                "type": "json_schema",
                "json_schema": {"name": "parcels", "schema": schema, "strict": True},
            },
        }
        if self.config.top_p is not None:
            payload["top_p"] = self.config.top_p

        data = await post_json(
            self._http, "/v1/chat/completions", payload, max_retries=self.config.max_retries
        )
        return data["choices"][0]["message"]["content"]

    async def is_available(self) -> bool:
        try:
            r = await self._http.get("/v1/models")
            return r.status_code == 200
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        await self._http.aclose()
