"""In-memory store for the current parcel run."""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from cadastreviz.core.types import ListFilter, RecordStatus, RunStatus
from cadastreviz.parcels.models import ParcelRecord, RunSnapshot

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[RunSnapshot], None]


class ParcelStore:
    """Holds the latest run snapshot and notifies listeners on every change.

    The snapshot is replaced wholesale on each publish, never mutated in
    place, so a listener holding an older snapshot keeps a consistent view.
    Suitable for single-instance deployment.
    """

    def __init__(self) -> None:
        self._snapshot = RunSnapshot()
        self._listeners: list[SnapshotListener] = []

    @property
    def snapshot(self) -> RunSnapshot:
        return self._snapshot

    @property
    def records(self) -> list[ParcelRecord]:
        return list(self._snapshot.records)

    @property
    def is_busy(self) -> bool:
        return self._snapshot.status in (RunStatus.PARSING_TEXT, RunStatus.RESOLVING)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- run lifecycle --

    def begin_run(self, message: str) -> None:
        """Start a new run, dropping every record of the previous one."""
        self._replace_all(RunSnapshot(status=RunStatus.PARSING_TEXT, message=message))

    def set_status(self, status: RunStatus, message: str) -> None:
        self._replace(status=status, message=message)

    def set_skipped_lines(self, lines: Sequence[str]) -> None:
        self._replace(skipped_lines=list(lines))

    def publish_records(self, records: Sequence[ParcelRecord]) -> None:
        self._replace(records=list(records))

    def fail_run(self, message: str) -> None:
        """Abort the run: back to idle, no partial record list."""
        self._replace_all(RunSnapshot(status=RunStatus.IDLE, message=message))

    # -- queries --

    def get(self, record_id: str) -> ParcelRecord | None:
        for record in self._snapshot.records:
            if record.id == record_id:
                return record
        return None

    def filtered(self, list_filter: ListFilter = ListFilter.ALL) -> list[ParcelRecord]:
        if list_filter == ListFilter.ALL:
            return self.records
        status = RecordStatus(list_filter.value)
        return [r for r in self._snapshot.records if r.status == status]

    # -- internal --

    def _replace(self, **changes: Any) -> None:
        self._replace_all(self._snapshot.model_copy(update=changes))

    def _replace_all(self, snapshot: RunSnapshot) -> None:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener %r failed", listener)
