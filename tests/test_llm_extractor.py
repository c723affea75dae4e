"""Tests for the LLM-backed extractor."""

from __future__ import annotations

import json

import httpx
import pytest

from cadastreviz.core.types import ExtractionStrategy
from cadastreviz.extraction import ExtractionError, LLMExtractor, create_extractor
from cadastreviz.extraction.llm import parse_llm_output
from cadastreviz.extraction.prompts import PARCEL_SCHEMA, build_extraction_prompt


def _parcels(*triples: tuple[str, str, str]) -> str:
    return json.dumps({
        "parcels": [
            {"commune_name": c, "section": s, "numero": n} for c, s, n in triples
        ]
    })


class TestParseLLMOutput:
    def test_object_with_parcels(self):
        queries = parse_llm_output(_parcels(("SCHORBACH", "C", "0584")))
        assert len(queries) == 1
        assert queries[0].commune_name == "SCHORBACH"
        assert queries[0].numero == "0584"

    def test_bare_array(self):
        raw = json.dumps([{"commune_name": "LENGELSHEIM", "section": "B", "numero": "0045"}])
        queries = parse_llm_output(raw)
        assert queries[0].section == "B"

    def test_code_fence_stripped(self):
        raw = "```json\n" + _parcels(("LENGELSHEIM", "B", "0045")) + "\n```"
        assert len(parse_llm_output(raw)) == 1

    def test_empty_array_is_allowed(self):
        assert parse_llm_output(_parcels()) == []

    def test_malformed_json(self):
        with pytest.raises(ExtractionError, match="malformed JSON"):
            parse_llm_output("not json at all")

    def test_missing_parcels_key(self):
        with pytest.raises(ExtractionError, match="no 'parcels' array"):
            parse_llm_output(json.dumps({"items": []}))

    def test_wrong_shape(self):
        with pytest.raises(ExtractionError, match="invalid parcels"):
            parse_llm_output(json.dumps({"parcels": [{"commune_name": "X"}]}))


class TestLLMExtractor:
    @pytest.mark.asyncio
    async def test_extract_preserves_order(self, fake_llm):
        client = fake_llm(
            _parcels(("SCHORBACH", "C", "0584"), ("LENGELSHEIM", "B", "0045"))
        )
        extractor = LLMExtractor(client)
        queries = await extractor.extract("some messy text")
        assert [q.commune_name for q in queries] == ["SCHORBACH", "LENGELSHEIM"]
        assert client.schemas == [PARCEL_SCHEMA]
        assert "some messy text" in client.prompts[0]

    @pytest.mark.asyncio
    async def test_transport_error_becomes_extraction_error(self, fake_llm):
        extractor = LLMExtractor(fake_llm(error=httpx.ConnectError("refused")))
        with pytest.raises(ExtractionError, match="AI extraction failed"):
            await extractor.extract("text")

    @pytest.mark.asyncio
    async def test_unexpected_response_becomes_extraction_error(self, fake_llm):
        extractor = LLMExtractor(fake_llm(error=KeyError("choices")))
        with pytest.raises(ExtractionError, match="unexpected response"):
            await extractor.extract("text")

    @pytest.mark.asyncio
    async def test_malformed_output(self, fake_llm):
        extractor = LLMExtractor(fake_llm("{oops"))
        with pytest.raises(ExtractionError):
            await extractor.extract("text")

    def test_strategy_and_message(self, fake_llm):
        extractor = create_extractor("llm", fake_llm())
        assert isinstance(extractor, LLMExtractor)
        assert extractor.strategy == ExtractionStrategy.LLM
        assert extractor.progress_message == "Asking AI to interpret parcel data..."


class TestPrompt:
    def test_prompt_includes_text(self):
        prompt = build_extraction_prompt("SCHORBACH S C N° 584")
        assert prompt.endswith("SCHORBACH S C N° 584\n")

    def test_prompt_asks_for_padding_and_marker_stripping(self):
        prompt = build_extraction_prompt("x")
        assert "4 digits" in prompt
        assert '"S"' in prompt

    def test_schema_requires_all_fields(self):
        item = PARCEL_SCHEMA["properties"]["parcels"]["items"]
        assert set(item["required"]) == {"commune_name", "section", "numero"}
