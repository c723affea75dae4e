"""Commune geocoding against geo.api.gouv.fr."""

from __future__ import annotations

import logging

import httpx

from cadastreviz.cadastre.models import Commune
from cadastreviz.core.config import GeoApiConfig

logger = logging.getLogger(__name__)


class GeoApiCommuneLookup:
    """Resolves a commune name to its INSEE code.

    Asks for the single best match weighted by population. Every failure
    (transport, non-200, undecodable body, empty result) is "not found".
    """

    def __init__(self, config: GeoApiConfig | None = None) -> None:
        self._config = config or GeoApiConfig()
        self._http = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=httpx.Timeout(self._config.timeout_seconds),
        )

    async def find_commune(self, name: str) -> Commune | None:
        params = {
            "nom": name,
            "fields": "code,nom",
            "boost": "population",
            "limit": 1,
        }
        try:
            resp = await self._http.get("/communes", params=params)
        except httpx.HTTPError as exc:
            logger.warning("Commune lookup for %r failed: %s", name, exc)
            return None

        if resp.status_code != 200:
            logger.warning("Commune lookup for %r returned %d", name, resp.status_code)
            return None

        try:
            data = resp.json()
        except ValueError:
            logger.warning("Commune lookup for %r returned a non-JSON body", name)
            return None

        if not isinstance(data, list) or not data:
            return None
        first = data[0]
        if not isinstance(first, dict) or not first.get("code"):
            return None
        return Commune(code=str(first["code"]), nom=str(first.get("nom") or ""))

    async def is_available(self) -> bool:
        try:
            r = await self._http.get("/communes", params={"code": "75056", "fields": "code"})
            return r.status_code == 200
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        await self._http.aclose()
