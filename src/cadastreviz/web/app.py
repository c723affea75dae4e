"""FastAPI application for CadastreViz.

Provides REST endpoints to resolve free-text parcel lists into cadastral
geometries, browse the results, and download them as GPX tracks.

Serve with:

    uvicorn cadastreviz.web.app:create_app --factory --port 8080
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from cadastreviz.cadastre.service import (
    CommuneLookup,
    ParcelGeometryLookup,
    create_cadastre_services,
)
from cadastreviz.core.config import Settings
from cadastreviz.core.health import timed_probe
from cadastreviz.core.types import HealthStatus
from cadastreviz.llm.client import LLMClient, create_llm_client
from cadastreviz.llm.health import check_llm_health
from cadastreviz.parcels.store import ParcelStore
from cadastreviz.resolution.pipeline import ParcelPipeline
from cadastreviz.resolution.resolver import ParcelResolver
from cadastreviz.web.parcels_router import router as parcels_router

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = "0.1.0"
    cadastre_provider: str
    llm_provider: str


# --- Application factory ---


def create_app(
    settings: Settings | None = None,
    communes: CommuneLookup | None = None,
    geometries: ParcelGeometryLookup | None = None,
    llm_client: LLMClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with mock lookups.

    Args:
        settings: Application settings. Defaults to Settings().
        communes: Optional pre-built commune lookup. Pass it together
            with ``geometries``.
        geometries: Optional pre-built parcel geometry lookup.
        llm_client: Optional pre-built LLM client for the llm strategy.

    Returns:
        A configured FastAPI instance.

    Raises:
        ValueError: If only one of ``communes`` and ``geometries`` is given.
    """
    if settings is None:
        settings = Settings()

    logging.getLogger("cadastreviz").setLevel(settings.log_level.upper())

    if (communes is None) != (geometries is None):
        raise ValueError("communes and geometries must be provided together")
    if communes is None or geometries is None:
        communes, geometries = create_cadastre_services(settings)

    if llm_client is None:
        llm_client = create_llm_client(settings.llm)

    store = ParcelStore()
    resolver = ParcelResolver(communes=communes, geometries=geometries)
    pipeline = ParcelPipeline(
        resolver=resolver,
        store=store,
        llm_client=llm_client,
        default_strategy=settings.extraction.strategy,
    )
    logger.info(
        "Parcel pipeline ready (cadastre=%s, llm=%s, strategy=%s)",
        settings.cadastre.provider, settings.llm.provider, settings.extraction.strategy,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        # The mock provider serves both lookups from one instance.
        closed: set[int] = set()
        for client in (communes, geometries, llm_client):
            if id(client) in closed:
                continue
            closed.add(id(client))
            await client.close()

    app = FastAPI(
        title="CadastreViz",
        description="Resolve French cadastral parcel references into geometries",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Store on app state for access in route handlers
    app.state.settings = settings
    app.state.parcel_store = store
    app.state.parcel_pipeline = pipeline
    app.state.commune_lookup = communes
    app.state.geometry_lookup = geometries
    app.state.llm_client = llm_client

    app.include_router(parcels_router)

    # --- Routes ---

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            service="cadastreviz",
            cadastre_provider=settings.cadastre.provider,
            llm_provider=settings.llm.provider,
        )

    @app.get("/api/health/services", response_model=list[HealthStatus])
    async def services_health(request: Request) -> list[HealthStatus]:
        """Probe the geocoding service and the configured LLM provider."""
        lookup = request.app.state.commune_lookup
        geocoding = await timed_probe(
            "geocoding",
            lookup.is_available,
            details={"provider": settings.cadastre.provider},
        )
        llm = await check_llm_health(settings.llm)
        return [geocoding, llm]

    return app
