"""Extractor strategy protocol, failure type, and factory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from cadastreviz.core.types import ExtractionStrategy
from cadastreviz.parcels.models import ParcelQuery

if TYPE_CHECKING:
    from cadastreviz.llm.client import LLMClient


class ExtractionError(RuntimeError):
    """Run-level failure: the text could not be turned into parcel queries."""


@runtime_checkable
class ParcelExtractor(Protocol):
    """Turns free text into an ordered list of parcel queries."""

    skipped_lines: list[str]

    @property
    def strategy(self) -> ExtractionStrategy: ...

    @property
    def progress_message(self) -> str: ...

    async def extract(self, text: str) -> list[ParcelQuery]: ...


def create_extractor(
    strategy: str | ExtractionStrategy,
    llm_client: LLMClient | None = None,
) -> ParcelExtractor:
    """Factory: instantiate the extractor for ``strategy``.

    There is no fallback between strategies; the LLM strategy requires a
    client.
    """
    from cadastreviz.extraction.llm import LLMExtractor
    from cadastreviz.extraction.pattern import PatternExtractor

    try:
        selected = ExtractionStrategy(str(strategy).lower())
    except ValueError:
        available = ", ".join(s.value for s in ExtractionStrategy)
        raise ValueError(
            f"Unknown extraction strategy {strategy!r}. Available: {available}"
        ) from None

    if selected == ExtractionStrategy.PATTERN:
        return PatternExtractor()
    if llm_client is None:
        raise ValueError("The llm extraction strategy requires an LLM client")
    return LLMExtractor(llm_client)
