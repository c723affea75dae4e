"""Shared test fixtures and helpers."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from cadastreviz.cadastre.service import MockCadastreService
from cadastreviz.core.config import CadastreConfig, LLMConfig, Settings
from cadastreviz.llm.client import LLMClient
from cadastreviz.parcels.models import ParcelQuery, ParcelRecord


def square_collection(lon: float, lat: float, size: float) -> dict[str, Any]:
    """A one-feature FeatureCollection holding a closed square ring."""
    ring = [
        [lon, lat],
        [lon + size, lat],
        [lon + size, lat + size],
        [lon, lat + size],
        [lon, lat],
    ]
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Polygon", "coordinates": [ring]},
                "properties": {},
            }
        ],
    }


class FakeLLMClient(LLMClient):
    """Returns a canned structured response, or raises a canned error."""

    def __init__(self, response: str = "", error: Exception | None = None) -> None:
        super().__init__(LLMConfig())
        self.response = response
        self.error = error
        self.prompts: list[str] = []
        self.schemas: list[dict[str, Any]] = []

    async def generate_structured(
        self, prompt, schema, *, system_prompt=None, temperature=0.0
    ) -> str:
        self.prompts.append(prompt)
        self.schemas.append(schema)
        if self.error is not None:
            raise self.error
        return self.response

    async def is_available(self) -> bool:
        return True


@pytest.fixture
def mock_settings() -> Settings:
    return Settings(
        cadastre=CadastreConfig(provider="mock"),
        llm=LLMConfig(provider="ollama", base_url="http://localhost:11434"),
    )


@pytest.fixture
def cadastre() -> MockCadastreService:
    return MockCadastreService()


@pytest.fixture
def make_record() -> Callable[..., ParcelRecord]:
    """Build a record already settled into the requested status."""

    def _make(
        record_id: str = "p-0",
        commune_name: str = "SCHORBACH",
        section: str = "C",
        numero: str = "0584",
        status: str = "success",
        geometry: dict[str, Any] | None = None,
    ) -> ParcelRecord:
        query = ParcelQuery(commune_name=commune_name, section=section, numero=numero)
        record = ParcelRecord.from_query(query, record_id)
        if status == "pending":
            return record
        record = record.mark_loading()
        if status == "loading":
            return record
        if status == "error":
            return record.fail("Commune not found")
        return record.succeed(
            "57640", geometry or square_collection(7.4321, 49.0812, 0.0009)
        )

    return _make


@pytest.fixture
def fake_llm() -> Callable[..., FakeLLMClient]:
    return FakeLLMClient


@pytest.fixture
def square() -> Callable[..., dict[str, Any]]:
    return square_collection
