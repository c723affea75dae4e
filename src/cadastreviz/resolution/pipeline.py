"""Run pipeline: free text -> parcel queries -> resolved records.

Extraction failures abort the whole run (status back to idle, message
surfaced, no records). Per-record lookup failures stay on the record and
never stop the run.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from cadastreviz.core.types import ExtractionStrategy, RunStatus
from cadastreviz.extraction.base import ExtractionError, create_extractor
from cadastreviz.parcels.models import ParcelQuery, ParcelRecord, RunSnapshot
from cadastreviz.parcels.store import ParcelStore
from cadastreviz.resolution.resolver import ParcelResolver

if TYPE_CHECKING:
    from cadastreviz.llm.client import LLMClient

logger = logging.getLogger(__name__)

RESOLVING_MESSAGE = "Resolving INSEE codes and geometries..."
COMPLETED_MESSAGE = "Processing complete."
GENERIC_FAILURE_MESSAGE = "An error occurred during processing."


class RunInProgressError(RuntimeError):
    """Raised when a run is requested while another one is still going."""


def build_records(queries: list[ParcelQuery]) -> list[ParcelRecord]:
    """One pending record per query, in order, with session-unique ids."""
    run_token = uuid.uuid4().hex[:12]
    return [
        ParcelRecord.from_query(query, f"p-{index}-{run_token}")
        for index, query in enumerate(queries)
    ]


class ParcelPipeline:
    """Drives a full run and publishes every step to the store.

    Args:
        resolver: The ParcelResolver used for network resolution.
        store: The ParcelStore that receives snapshots.
        llm_client: LLM client for the llm strategy, if configured.
        default_strategy: Strategy used when ``run`` is not given one.
    """

    def __init__(
        self,
        resolver: ParcelResolver,
        store: ParcelStore,
        llm_client: LLMClient | None = None,
        default_strategy: str | ExtractionStrategy = ExtractionStrategy.PATTERN,
    ) -> None:
        self._resolver = resolver
        self._store = store
        self._llm_client = llm_client
        self._default_strategy = default_strategy

    @property
    def store(self) -> ParcelStore:
        return self._store

    async def run(
        self,
        text: str,
        strategy: str | ExtractionStrategy | None = None,
    ) -> RunSnapshot:
        """Run extraction then resolution; a new run replaces all prior records.

        Raises:
            RunInProgressError: If a run is already in progress.
            ValueError: If the strategy is unknown or cannot be built.
        """
        if not text.strip():
            return self._store.snapshot
        if self._store.is_busy:
            raise RunInProgressError("A parcel run is already in progress")

        extractor = create_extractor(strategy or self._default_strategy, self._llm_client)
        logger.info("Starting %s run", extractor.strategy)
        self._store.begin_run(extractor.progress_message)

        try:
            queries = await extractor.extract(text)
        except ExtractionError as exc:
            logger.warning("Extraction failed: %s", exc)
            self._store.fail_run(str(exc))
            return self._store.snapshot
        except Exception:
            logger.exception("Unexpected extraction failure")
            self._store.fail_run(GENERIC_FAILURE_MESSAGE)
            return self._store.snapshot

        for line in extractor.skipped_lines:
            logger.info("Skipped unmatched line: %r", line)

        records = build_records(queries)
        self._store.set_skipped_lines(extractor.skipped_lines)
        self._store.publish_records(records)
        self._store.set_status(RunStatus.RESOLVING, RESOLVING_MESSAGE)

        try:
            resolved = await self._resolver.resolve_all(
                records, on_progress=self._store.publish_records
            )
        except Exception:
            logger.exception("Resolution aborted")
            self._store.set_status(RunStatus.IDLE, GENERIC_FAILURE_MESSAGE)
            return self._store.snapshot

        self._store.publish_records(resolved)
        self._store.set_status(RunStatus.COMPLETED, COMPLETED_MESSAGE)
        logger.info(
            "Run complete: %d success, %d error",
            self._store.snapshot.stats.success,
            self._store.snapshot.stats.error,
        )
        return self._store.snapshot
