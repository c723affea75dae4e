"""FastAPI router for parcel resolution, browsing and export endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from pydantic import BaseModel, Field

from cadastreviz.core.types import ExtractionStrategy, ListFilter, RunStatus
from cadastreviz.export.archive import build_gpx_archive
from cadastreviz.export.clipboard import clipboard_text
from cadastreviz.geometry.edges import compute_edges
from cadastreviz.parcels.models import Edge, RunSnapshot, RunStats
from cadastreviz.parcels.store import ParcelStore
from cadastreviz.parcels.views import MapPayload, RecordView, build_map_payload, record_view
from cadastreviz.resolution.pipeline import ParcelPipeline, RunInProgressError

router = APIRouter()
logger = logging.getLogger(__name__)

# Streamed runs outlive their request if the client disconnects.
_background_runs: set[asyncio.Task] = set()


class ResolveRequest(BaseModel):
    text: str
    strategy: ExtractionStrategy | None = None


class ParcelListResponse(BaseModel):
    status: RunStatus
    message: str
    records: list[RecordView] = Field(default_factory=list)
    stats: RunStats
    skipped_lines: list[str] = Field(default_factory=list)


def _pipeline(request: Request) -> ParcelPipeline:
    return request.app.state.parcel_pipeline


def _store(request: Request) -> ParcelStore:
    return request.app.state.parcel_store


# --- Runs ---


@router.post("/api/parcels/resolve", response_model=RunSnapshot)
async def resolve_parcels(body: ResolveRequest, request: Request) -> RunSnapshot:
    """Extract parcels from free text and resolve them, replacing the previous run."""
    try:
        return await _pipeline(request).run(body.text, body.strategy)
    except RunInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.post("/api/parcels/resolve/stream")
async def resolve_parcels_stream(body: ResolveRequest, request: Request) -> StreamingResponse:
    """Same as /resolve, but streams every published snapshot as Server-Sent Events."""
    pipeline = _pipeline(request)
    store = pipeline.store
    if store.is_busy:
        raise HTTPException(status_code=409, detail="A parcel run is already in progress")

    async def gen() -> AsyncGenerator[str, None]:
        queue: asyncio.Queue[str | None] = asyncio.Queue()
        unsubscribe = store.subscribe(lambda snap: queue.put_nowait(snap.model_dump_json()))
        task = asyncio.create_task(pipeline.run(body.text, body.strategy))
        _background_runs.add(task)
        task.add_done_callback(_background_runs.discard)
        task.add_done_callback(lambda _: queue.put_nowait(None))
        try:
            while (data := await queue.get()) is not None:
                yield f"data: {data}\n\n"
            if not task.cancelled() and task.exception() is not None:
                logger.error("Streamed run failed: %s", task.exception())
                detail = RunSnapshot(status=RunStatus.IDLE, message=str(task.exception()))
                yield f"event: error\ndata: {detail.model_dump_json()}\n\n"
                return
            yield f"event: done\ndata: {store.snapshot.model_dump_json()}\n\n"
        finally:
            unsubscribe()

    return StreamingResponse(gen(), media_type="text/event-stream")


# --- Browsing ---


@router.get("/api/parcels", response_model=ParcelListResponse)
async def list_parcels(
    request: Request,
    status: ListFilter = ListFilter.ALL,
) -> ParcelListResponse:
    """List records of the current run with their area, plus run stats."""
    store = _store(request)
    snapshot = store.snapshot
    return ParcelListResponse(
        status=snapshot.status,
        message=snapshot.message,
        records=[record_view(r) for r in store.filtered(status)],
        stats=snapshot.stats,
        skipped_lines=snapshot.skipped_lines,
    )


@router.get("/api/parcels/edges", response_model=list[Edge])
async def parcel_edges(
    request: Request,
    ids: list[str] = Query(default=[]),
) -> list[Edge]:
    """Edge length labels for the requested records."""
    return compute_edges(_store(request).records, ids)


@router.get("/api/parcels/map", response_model=MapPayload)
async def parcel_map(
    request: Request,
    selected: str | None = None,
    measure: list[str] = Query(default=[]),
) -> MapPayload:
    """Polygons, selection and edge labels for the map widget."""
    return build_map_payload(_store(request).records, selected, measure)


# --- Export ---


@router.get("/api/parcels/export")
async def export_parcels(request: Request) -> Response:
    """Download every successful parcel as a GPX track inside one zip archive."""
    result = build_gpx_archive(_store(request).records)
    if result.refused:
        raise HTTPException(status_code=404, detail=result.notice)
    logger.info("Exported %d GPX tracks to %s", result.file_count, result.filename)
    return Response(
        content=result.content,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.get("/api/parcels/clipboard", response_class=PlainTextResponse)
async def parcels_clipboard(
    request: Request,
    status: ListFilter = ListFilter.ALL,
) -> PlainTextResponse:
    """One "commune Section X N° Y" line per record matching the filter."""
    return PlainTextResponse(clipboard_text(_store(request).filtered(status)))


@router.get("/api/parcels/{record_id}", response_model=RecordView)
async def get_parcel(record_id: str, request: Request) -> RecordView:
    """Look up a single record of the current run."""
    record = _store(request).get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Parcel {record_id!r} not found")
    return record_view(record)
