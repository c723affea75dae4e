"""Text-to-parcel extraction strategies."""

from cadastreviz.extraction.base import ExtractionError, ParcelExtractor, create_extractor
from cadastreviz.extraction.llm import LLMExtractor
from cadastreviz.extraction.pattern import PatternExtractor, parse_parcel_lines

__all__ = [
    "ExtractionError",
    "LLMExtractor",
    "ParcelExtractor",
    "PatternExtractor",
    "create_extractor",
    "parse_parcel_lines",
]
