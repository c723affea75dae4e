"""Deterministic line-by-line parcel extractor.

Each non-blank line is tried against two patterns, first match wins:

- explicit: ``<commune> <section marker> <section> [<number marker>] <number>``,
  e.g. ``SCHORBACH S C N° 0584`` or ``LENGELSHEIM Section B N° 45``;
- minimal: ``<commune> <section> <number>``, e.g. ``LENGELSHEIM B 45``.

The commune is captured lazily so a marker is never swallowed into the
name. A line matching neither pattern produces no query; it is reported in
``skipped_lines``.
"""

from __future__ import annotations

import logging
import re

from pydantic import BaseModel, Field

from cadastreviz.core.types import ExtractionStrategy
from cadastreviz.extraction.base import ExtractionError
from cadastreviz.parcels.models import ParcelQuery

logger = logging.getLogger(__name__)

SECTION_MARKERS = ("Section", "Sect", "Sec", "S")
NUMBER_MARKERS = ("Numéro", "Numero", "Num", "N°", "Nº", "No", "N")

NO_PARCELS_MESSAGE = (
    "No parcels detected using pattern mode. "
    "Check the input format or switch to AI analysis."
)


def _alternation(words: tuple[str, ...]) -> str:
    return "|".join(re.escape(w) for w in words)


_EXPLICIT = re.compile(
    r"^(.+?)\s+"
    rf"(?:{_alternation(SECTION_MARKERS)})\.?\s+"
    r"([A-Z0-9]{1,2})\s+"
    rf"(?:(?:{_alternation(NUMBER_MARKERS)})\.?\s*)?"
    r"([0-9]+)$",
    re.IGNORECASE,
)

_MINIMAL = re.compile(
    r"^(.+?)\s+([A-Z0-9]{1,2})\s+([0-9]+)$",
    re.IGNORECASE,
)


class ExtractionReport(BaseModel):
    queries: list[ParcelQuery] = Field(default_factory=list)
    skipped_lines: list[str] = Field(default_factory=list)


def match_line(line: str) -> ParcelQuery | None:
    """Match a single trimmed line, explicit pattern first."""
    for pattern in (_EXPLICIT, _MINIMAL):
        match = pattern.match(line)
        if match:
            return ParcelQuery(
                commune_name=match.group(1).strip(),
                section=match.group(2).upper(),
                numero=match.group(3),
            )
    return None


def parse_parcel_lines(text: str) -> ExtractionReport:
    """Parse every non-blank line of ``text``, preserving input order."""
    report = ExtractionReport()
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        query = match_line(line)
        if query is None:
            report.skipped_lines.append(line)
        else:
            report.queries.append(query)
    return report


class PatternExtractor:
    """Regex-based extractor. Pure and synchronous under an async facade."""

    def __init__(self) -> None:
        self.skipped_lines: list[str] = []

    @property
    def strategy(self) -> ExtractionStrategy:
        return ExtractionStrategy.PATTERN

    @property
    def progress_message(self) -> str:
        return "Parsing text locally..."

    async def extract(self, text: str) -> list[ParcelQuery]:
        """Extract queries; zero matches on non-empty input is a failure."""
        report = parse_parcel_lines(text)
        self.skipped_lines = report.skipped_lines
        if report.skipped_lines:
            logger.info(
                "Pattern extraction skipped %d unmatched line(s)",
                len(report.skipped_lines),
            )
        if text.strip() and not report.queries:
            raise ExtractionError(NO_PARCELS_MESSAGE)
        return report.queries
