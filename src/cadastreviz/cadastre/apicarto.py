"""Parcel geometry lookup against the IGN API Carto cadastre module."""

from __future__ import annotations

import logging

import httpx

from cadastreviz.cadastre.models import CadastreResponse
from cadastreviz.core.config import CadastreConfig

logger = logging.getLogger(__name__)


class ApiCartoParcelLookup:
    """Fetches the GeoJSON FeatureCollection of one parcel.

    Returns the raw outcome; deciding whether to retry or how to classify
    an empty collection is up to the caller. Returns ``None`` when no
    usable response was received at all.
    """

    def __init__(self, config: CadastreConfig | None = None) -> None:
        self._config = config or CadastreConfig()
        self._http = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=httpx.Timeout(self._config.timeout_seconds),
        )

    async def fetch_parcel(
        self,
        insee_code: str,
        section: str,
        numero: str,
    ) -> CadastreResponse | None:
        params = {"code_insee": insee_code, "section": section, "numero": numero}
        try:
            resp = await self._http.get("/parcelle", params=params)
        except httpx.HTTPError as exc:
            logger.warning(
                "Geometry lookup %s %s %s failed: %s", insee_code, section, numero, exc
            )
            return None

        if not resp.is_success:
            return CadastreResponse(ok=False, status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError:
            logger.warning(
                "Geometry lookup %s %s %s returned a non-JSON body", insee_code, section, numero
            )
            return None

        if not isinstance(data, dict):
            return CadastreResponse(ok=True, status_code=resp.status_code)
        return CadastreResponse(ok=True, status_code=resp.status_code, data=data)

    async def close(self) -> None:
        await self._http.aclose()
