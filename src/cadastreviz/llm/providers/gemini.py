"""Google Gemini provider using the Generative Language REST API."""

from __future__ import annotations

from typing import Any

import httpx

from cadastreviz.core.config import LLMConfig
from cadastreviz.llm.client import LLMClient
from cadastreviz.llm.transport import post_json

# Keys of JSON Schema that the Gemini response schema subset rejects.
_UNSUPPORTED_SCHEMA_KEYS = {"additionalProperties", "$schema", "title"}


class GeminiClient(LLMClient):
    """Talks to the Gemini ``generateContent`` endpoint.

    ``config.base_url`` should point at the API root, for example
    ``https://generativelanguage.googleapis.com``.
    """

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        headers: dict[str, str] = {}
        if config.api_key:
            headers["x-goog-api-key"] = config.api_key
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
        generation_config: dict[str, Any] = {
            "temperature": temperature,
            "maxOutputTokens": self.config.max_tokens,
            "responseMimeType": "application/json",
            "responseSchema": to_gemini_schema(schema),
        }
        if self.config.top_p is not None:
            generation_config["topP"] = self.config.top_p
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if system_prompt is not None:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        data = await post_json(
            self._http,
            f"/v1beta/models/{self.config.model}:generateContent",
            payload,
            max_retries=self.config.max_retries,
        )
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)

    async def is_available(self) -> bool:
        try:
            r = await self._http.get(f"/v1beta/models/{self.config.model}")
            return r.status_code == 200
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        await self._http.aclose()


def to_gemini_schema(schema: Any) -> Any:
    """Convert a JSON schema into the OpenAPI subset Gemini accepts.

    Type names are upper-cased and unsupported keywords dropped.
    """
    if isinstance(schema, list):
        return [to_gemini_schema(item) for item in schema]
    if not isinstance(schema, dict):
        return schema
    converted: dict[str, Any] = {}
    for key, value in schema.items():
        if key in _UNSUPPORTED_SCHEMA_KEYS:
            continue
        if key == "type" and isinstance(value, str):
            converted[key] = value.upper()
        elif key == "properties" and isinstance(value, dict):
            converted[key] = {name: to_gemini_schema(sub) for name, sub in value.items()}
        else:
            converted[key] = to_gemini_schema(value)
    return converted
