"""Sequential two-stage parcel resolution.

For each record, one at a time:

1. mark it loading;
2. geocode the commune name to an INSEE code;
3. fetch the parcel geometry (numero zero-padded to 4 digits), retrying
   once with the section zero-padded to 2 characters when a single-character
   section gets a non-OK response;
4. settle the record as success (non-empty FeatureCollection) or error.

Records are never resolved concurrently, both to stay within the public
services' rate limits and so observers see one record settle at a time.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from cadastreviz.cadastre.models import CadastreResponse
from cadastreviz.cadastre.service import CommuneLookup, ParcelGeometryLookup
from cadastreviz.geometry.shapes import as_feature_collection
from cadastreviz.parcels.models import ParcelRecord

logger = logging.getLogger(__name__)

COMMUNE_NOT_FOUND = "Commune not found"
GEOMETRY_NOT_FOUND = "Parcel geometry not found in Cadastre"

ProgressCallback = Callable[[Sequence[ParcelRecord]], None]


def pad_numero(numero: str) -> str:
    return numero.zfill(4)


class ParcelResolver:
    """Resolves parcel records against the commune and geometry lookups.

    Args:
        communes: Commune name -> INSEE code lookup.
        geometries: INSEE code + section + numero -> geometry lookup.
    """

    def __init__(
        self,
        communes: CommuneLookup,
        geometries: ParcelGeometryLookup,
    ) -> None:
        self._communes = communes
        self._geometries = geometries

    async def resolve_all(
        self,
        records: Sequence[ParcelRecord],
        on_progress: ProgressCallback | None = None,
    ) -> list[ParcelRecord]:
        """Resolve ``records`` in order and return the settled list.

        ``on_progress`` receives a fresh copy of the whole list when a record
        starts loading and again when it settles, before the next one starts.
        """
        working = list(records)
        for index, record in enumerate(working):
            working[index] = record.mark_loading()
            self._publish(working, on_progress)

            working[index] = await self.resolve(working[index])
            self._publish(working, on_progress)
        return working

    async def resolve(self, record: ParcelRecord) -> ParcelRecord:
        """Settle a single loading record. Failures end up on the record, never raised."""
        commune = await self._communes.find_commune(record.commune_name)
        if commune is None:
            logger.info("Commune %r not found", record.commune_name)
            return record.fail(COMMUNE_NOT_FOUND)

        geometry = await self._fetch_geometry(commune.code, record.section, record.numero)
        if geometry is None:
            logger.info(
                "No geometry for %s (INSEE %s)", record.raw_text, commune.code
            )
            return record.fail(GEOMETRY_NOT_FOUND, insee_code=commune.code)

        return record.succeed(commune.code, geometry)

    async def _fetch_geometry(
        self,
        insee_code: str,
        section: str,
        numero: str,
    ) -> dict | None:
        padded_numero = pad_numero(numero)
        response = await self._geometries.fetch_parcel(insee_code, section, padded_numero)

        if response is not None and not response.ok and len(section) == 1:
            padded_section = section.zfill(2)
            logger.info(
                "Geometry lookup %s %s %s returned %d, retrying with section %s",
                insee_code, section, padded_numero, response.status_code, padded_section,
            )
            response = await self._geometries.fetch_parcel(
                insee_code, padded_section, padded_numero
            )

        return _non_empty_collection(response)

    @staticmethod
    def _publish(
        working: list[ParcelRecord],
        on_progress: ProgressCallback | None,
    ) -> None:
        if on_progress is not None:
            on_progress(list(working))


def _non_empty_collection(response: CadastreResponse | None) -> dict | None:
    if response is None or not response.ok:
        return None
    collection = as_feature_collection(response.data)
    if collection is None or not collection["features"]:
        return None
    return collection
