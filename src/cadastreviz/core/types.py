"""Core type definitions shared across all CadastreViz modules."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class RecordStatus(StrEnum):
    """Resolution status of a single parcel record.

    Moves forward only: pending -> loading -> success | error.
    """

    PENDING = "pending"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class RunStatus(StrEnum):
    """Status of a whole extraction + resolution run."""

    IDLE = "idle"
    PARSING_TEXT = "parsing_text"
    RESOLVING = "resolving"
    COMPLETED = "completed"


class ExtractionStrategy(StrEnum):
    """Available text-to-parcel extraction strategies."""

    PATTERN = "pattern"
    LLM = "llm"


class ListFilter(StrEnum):
    """Record list filter used by the list view and clipboard export."""

    ALL = "all"
    SUCCESS = "success"
    ERROR = "error"


class HealthStatus(BaseModel):
    """Health check response for any service."""

    service: str
    healthy: bool
    latency_ms: float | None = None
    details: dict[str, Any] = Field(default_factory=dict)
