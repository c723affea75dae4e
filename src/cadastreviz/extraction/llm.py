"""LLM-backed extractor using structured (JSON schema) output."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from cadastreviz.core.types import ExtractionStrategy
from cadastreviz.extraction.base import ExtractionError
from cadastreviz.extraction.prompts import (
    PARCEL_SCHEMA,
    SYSTEM_PROMPT,
    build_extraction_prompt,
)
from cadastreviz.llm.client import LLMClient
from cadastreviz.parcels.models import ParcelQuery

logger = logging.getLogger(__name__)

_QUERY_LIST = TypeAdapter(list[ParcelQuery])


class LLMExtractor:
    """Sends the whole text to an LLM and returns its parcel array as-is.

    Any transport, decoding, or shape failure is raised as ExtractionError;
    there is no local fallback to the pattern extractor.
    """

    def __init__(self, client: LLMClient) -> None:
        self._client = client
        self.skipped_lines: list[str] = []

    @property
    def strategy(self) -> ExtractionStrategy:
        return ExtractionStrategy.LLM

    @property
    def progress_message(self) -> str:
        return "Asking AI to interpret parcel data..."

    async def extract(self, text: str) -> list[ParcelQuery]:
        try:
            raw = await self._client.generate_structured(
                build_extraction_prompt(text),
                PARCEL_SCHEMA,
                system_prompt=SYSTEM_PROMPT,
            )
        except httpx.HTTPError as exc:
            logger.warning("LLM extraction request failed: %s", exc)
            raise ExtractionError(f"AI extraction failed: {exc}") from exc
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise ExtractionError(f"AI extraction returned an unexpected response: {exc}") from exc

        return parse_llm_output(raw)


def parse_llm_output(raw: str) -> list[ParcelQuery]:
    """Decode the model output into queries.

    Accepts either ``{"parcels": [...]}`` or a bare array.
    """
    try:
        payload: Any = json.loads(_strip_code_fence(raw))
    except json.JSONDecodeError as exc:
        raise ExtractionError("AI extraction returned malformed JSON") from exc

    if isinstance(payload, dict):
        if "parcels" not in payload:
            raise ExtractionError("AI extraction response has no 'parcels' array")
        payload = payload["parcels"]

    try:
        return _QUERY_LIST.validate_python(payload)
    except ValidationError as exc:
        raise ExtractionError(f"AI extraction returned invalid parcels: {exc}") from exc


def _strip_code_fence(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()
