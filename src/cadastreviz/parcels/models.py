"""Parcel data models."""

from __future__ import annotations

from typing import Any, Sequence

from pydantic import BaseModel, Field, computed_field, model_validator

from cadastreviz.core.types import RecordStatus, RunStatus

_FORWARD: dict[RecordStatus, set[RecordStatus]] = {
    RecordStatus.PENDING: {RecordStatus.LOADING},
    RecordStatus.LOADING: {RecordStatus.SUCCESS, RecordStatus.ERROR},
    RecordStatus.SUCCESS: set(),
    RecordStatus.ERROR: set(),
}


class ParcelQuery(BaseModel):
    """A commune + section + numero triple extracted from free text."""

    model_config = {"frozen": True}

    commune_name: str
    section: str
    numero: str


class ParcelRecord(ParcelQuery):
    """A parcel query tracked through resolution.

    ``geometry`` is set only on success and ``error_message`` only on error.
    ``numero`` is stored as extracted; padding happens at lookup time.
    """

    id: str
    status: RecordStatus = RecordStatus.PENDING
    insee_code: str | None = None
    geometry: dict[str, Any] | None = None
    error_message: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def raw_text(self) -> str:
        return f"{self.commune_name} {self.section} {self.numero}"

    @model_validator(mode="after")
    def _check_status_fields(self) -> ParcelRecord:
        if (self.geometry is not None) != (self.status == RecordStatus.SUCCESS):
            raise ValueError("geometry must be set if and only if status is success")
        if (self.error_message is not None) != (self.status == RecordStatus.ERROR):
            raise ValueError("error_message must be set if and only if status is error")
        return self

    @classmethod
    def from_query(cls, query: ParcelQuery, record_id: str) -> ParcelRecord:
        return cls(
            id=record_id,
            commune_name=query.commune_name,
            section=query.section,
            numero=query.numero,
        )

    def mark_loading(self) -> ParcelRecord:
        return self._advance(RecordStatus.LOADING)

    def succeed(self, insee_code: str, geometry: dict[str, Any]) -> ParcelRecord:
        return self._advance(RecordStatus.SUCCESS, insee_code=insee_code, geometry=geometry)

    def fail(self, message: str, insee_code: str | None = None) -> ParcelRecord:
        return self._advance(RecordStatus.ERROR, insee_code=insee_code, error_message=message)

    def _advance(self, status: RecordStatus, **changes: Any) -> ParcelRecord:
        if status not in _FORWARD[self.status]:
            raise ValueError(
                f"Invalid status transition for {self.id!r}: {self.status} -> {status}"
            )
        data = self.model_dump(exclude={"raw_text"})
        data.update(changes)
        data["status"] = status
        return ParcelRecord.model_validate(data)


class LatLon(BaseModel):
    lat: float
    lng: float


class Edge(BaseModel):
    """A labelled polygon boundary segment for measurement overlays."""

    position: LatLon
    length_meters: int
    record_id: str


class RunStats(BaseModel):
    total: int = 0
    success: int = 0
    error: int = 0
    pending: int = 0

    @classmethod
    def from_records(cls, records: Sequence[ParcelRecord]) -> RunStats:
        return cls(
            total=len(records),
            success=sum(1 for r in records if r.status == RecordStatus.SUCCESS),
            error=sum(1 for r in records if r.status == RecordStatus.ERROR),
            pending=sum(
                1 for r in records
                if r.status in (RecordStatus.PENDING, RecordStatus.LOADING)
            ),
        )


class RunSnapshot(BaseModel):
    """State of the current run as published to observers."""

    status: RunStatus = RunStatus.IDLE
    message: str = ""
    records: list[ParcelRecord] = Field(default_factory=list)
    skipped_lines: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def stats(self) -> RunStats:
        return RunStats.from_records(self.records)
