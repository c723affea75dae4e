"""Cadastre lookup protocols, mock implementation, and factory."""

from __future__ import annotations

from typing import Any, Protocol

from cadastreviz.cadastre.models import CadastreResponse, Commune
from cadastreviz.core.config import Settings


class CommuneLookup(Protocol):
    """Protocol for commune name -> INSEE code geocoding."""

    async def find_commune(self, name: str) -> Commune | None: ...
    async def is_available(self) -> bool: ...
    async def close(self) -> None: ...


class ParcelGeometryLookup(Protocol):
    """Protocol for INSEE code + section + numero -> parcel geometry."""

    async def fetch_parcel(
        self, insee_code: str, section: str, numero: str
    ) -> CadastreResponse | None: ...
    async def close(self) -> None: ...


def _square_parcel(lon: float, lat: float, size: float, idu: str) -> dict[str, Any]:
    ring = [
        [lon, lat],
        [lon + size, lat],
        [lon + size, lat + size],
        [lon, lat + size],
        [lon, lat],
    ]
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "id": idu,
                "geometry": {"type": "Polygon", "coordinates": [ring]},
                "properties": {"idu": idu},
            }
        ],
    }


class MockCadastreService:
    """Mock geocoding + geometry service with fixture parcels for development/testing.

    Like the real geometry service it rejects section codes that are not two
    characters long, so single-letter sections need the zero-padded retry.
    """

    def __init__(self) -> None:
        self._communes: dict[str, Commune] = {}
        self._parcels: dict[tuple[str, str, str], dict[str, Any]] = {}
        self._load_fixtures()

    def _load_fixtures(self) -> None:
        communes = [
            Commune(code="57640", nom="Schorbach"),
            Commune(code="57508", nom="Nousseviller-lès-Bitche"),
            Commune(code="57394", nom="Lengelsheim"),
        ]
        for commune in communes:
            self._communes[commune.nom.lower()] = commune
        self._communes["nousseviller-les-bitche"] = communes[1]

        self._parcels[("57640", "0C", "0584")] = _square_parcel(
            7.4321, 49.0812, 0.0009, "576400000C0584"
        )
        self._parcels[("57508", "10", "0123")] = _square_parcel(
            7.3642, 49.0951, 0.0006, "575080000100123"
        )
        self._parcels[("57394", "0B", "0045")] = _square_parcel(
            7.4768, 49.1043, 0.0012, "573940000B0045"
        )

    async def find_commune(self, name: str) -> Commune | None:
        return self._communes.get(name.strip().lower())

    async def fetch_parcel(
        self, insee_code: str, section: str, numero: str
    ) -> CadastreResponse | None:
        if len(section) != 2:
            return CadastreResponse(ok=False, status_code=400)
        collection = self._parcels.get((insee_code, section, numero))
        if collection is None:
            return CadastreResponse(
                ok=True,
                status_code=200,
                data={"type": "FeatureCollection", "features": []},
            )
        return CadastreResponse(ok=True, status_code=200, data=collection)

    async def is_available(self) -> bool:
        return True

    async def close(self) -> None:
        return None


def create_cadastre_services(
    settings: Settings,
) -> tuple[CommuneLookup, ParcelGeometryLookup]:
    """Factory: build the commune and geometry lookups for ``settings.cadastre.provider``."""
    from cadastreviz.cadastre.apicarto import ApiCartoParcelLookup
    from cadastreviz.cadastre.geo_api import GeoApiCommuneLookup

    provider = settings.cadastre.provider.lower()
    if provider == "mock":
        mock = MockCadastreService()
        return mock, mock
    if provider == "api":
        return GeoApiCommuneLookup(settings.geoapi), ApiCartoParcelLookup(settings.cadastre)
    raise ValueError(
        f"Unknown cadastre provider {settings.cadastre.provider!r}. Available: api, mock"
    )
