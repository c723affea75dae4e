"""Tests for the sequential parcel resolver."""

from __future__ import annotations

import pytest

from cadastreviz.cadastre.models import CadastreResponse, Commune
from cadastreviz.core.types import RecordStatus
from cadastreviz.parcels.models import ParcelQuery, ParcelRecord
from cadastreviz.resolution.resolver import (
    COMMUNE_NOT_FOUND,
    GEOMETRY_NOT_FOUND,
    ParcelResolver,
    pad_numero,
)


class ScriptedLookup:
    """Commune + geometry lookup answering from dictionaries and recording calls."""

    def __init__(self, communes=None, responses=None):
        self.communes = communes or {}
        self.responses = responses or {}
        self.commune_calls: list[str] = []
        self.parcel_calls: list[tuple[str, str, str]] = []

    async def find_commune(self, name):
        self.commune_calls.append(name)
        code = self.communes.get(name)
        return Commune(code=code) if code else None

    async def is_available(self):
        return True

    async def fetch_parcel(self, insee_code, section, numero):
        self.parcel_calls.append((insee_code, section, numero))
        return self.responses.get((insee_code, section, numero))

    async def close(self):
        return None


def _record(commune="SCHORBACH", section="C", numero="584", record_id="p-0") -> ParcelRecord:
    query = ParcelQuery(commune_name=commune, section=section, numero=numero)
    return ParcelRecord.from_query(query, record_id)


def _ok(data) -> CadastreResponse:
    return CadastreResponse(ok=True, status_code=200, data=data)


def _rejected(status_code=400) -> CadastreResponse:
    return CadastreResponse(ok=False, status_code=status_code)


def _resolver(lookup: ScriptedLookup) -> ParcelResolver:
    return ParcelResolver(communes=lookup, geometries=lookup)


class TestPadNumero:
    def test_pads_to_four(self):
        assert pad_numero("45") == "0045"

    def test_keeps_longer(self):
        assert pad_numero("12345") == "12345"


class TestResolve:
    @pytest.mark.asyncio
    async def test_section_retry_succeeds(self, square):
        collection = square(7.43, 49.08, 0.001)
        lookup = ScriptedLookup(
            communes={"SCHORBACH": "57640"},
            responses={
                ("57640", "C", "0584"): _rejected(),
                ("57640", "0C", "0584"): _ok(collection),
            },
        )
        record = await _resolver(lookup).resolve(_record().mark_loading())

        assert record.status == RecordStatus.SUCCESS
        assert record.insee_code == "57640"
        assert record.geometry == collection
        assert record.numero == "584"
        assert lookup.parcel_calls == [("57640", "C", "0584"), ("57640", "0C", "0584")]

    @pytest.mark.asyncio
    async def test_section_retry_also_fails(self):
        lookup = ScriptedLookup(
            communes={"SCHORBACH": "57640"},
            responses={
                ("57640", "C", "0584"): _rejected(),
                ("57640", "0C", "0584"): _rejected(404),
            },
        )
        record = await _resolver(lookup).resolve(_record().mark_loading())

        assert lookup.parcel_calls == [("57640", "C", "0584"), ("57640", "0C", "0584")]
        assert record.status == RecordStatus.ERROR
        assert record.error_message == GEOMETRY_NOT_FOUND
        assert record.insee_code == "57640"
        assert record.geometry is None

    @pytest.mark.asyncio
    async def test_commune_not_found(self):
        lookup = ScriptedLookup()
        record = await _resolver(lookup).resolve(_record().mark_loading())

        assert record.status == RecordStatus.ERROR
        assert record.error_message == COMMUNE_NOT_FOUND
        assert record.insee_code is None
        assert record.geometry is None
        assert lookup.parcel_calls == []

    @pytest.mark.asyncio
    async def test_empty_collection_is_error_with_insee(self):
        lookup = ScriptedLookup(
            communes={"SCHORBACH": "57640"},
            responses={("57640", "0C", "0584"): _ok({"type": "FeatureCollection", "features": []})},
        )
        record = await _resolver(lookup).resolve(_record(section="0C").mark_loading())

        assert record.status == RecordStatus.ERROR
        assert record.error_message == GEOMETRY_NOT_FOUND
        assert record.insee_code == "57640"

    @pytest.mark.asyncio
    async def test_no_retry_for_two_char_section(self):
        lookup = ScriptedLookup(
            communes={"SCHORBACH": "57640"},
            responses={("57640", "AB", "0012"): _rejected()},
        )
        record = await _resolver(lookup).resolve(_record(section="AB", numero="12").mark_loading())

        assert record.status == RecordStatus.ERROR
        assert lookup.parcel_calls == [("57640", "AB", "0012")]

    @pytest.mark.asyncio
    async def test_no_retry_on_transport_failure(self):
        lookup = ScriptedLookup(communes={"SCHORBACH": "57640"})
        record = await _resolver(lookup).resolve(_record().mark_loading())

        assert record.status == RecordStatus.ERROR
        assert lookup.parcel_calls == [("57640", "C", "0584")]

    @pytest.mark.asyncio
    async def test_no_retry_when_first_attempt_is_ok_but_empty(self):
        lookup = ScriptedLookup(
            communes={"SCHORBACH": "57640"},
            responses={("57640", "C", "0584"): _ok({"type": "FeatureCollection", "features": []})},
        )
        record = await _resolver(lookup).resolve(_record().mark_loading())

        assert record.status == RecordStatus.ERROR
        assert len(lookup.parcel_calls) == 1

    @pytest.mark.asyncio
    async def test_single_feature_is_wrapped(self, square):
        feature = square(7.43, 49.08, 0.001)["features"][0]
        lookup = ScriptedLookup(
            communes={"SCHORBACH": "57640"},
            responses={("57640", "0C", "0584"): _ok(feature)},
        )
        record = await _resolver(lookup).resolve(_record(section="0C").mark_loading())

        assert record.status == RecordStatus.SUCCESS
        assert record.geometry == {"type": "FeatureCollection", "features": [feature]}


class TestResolveAll:
    @pytest.mark.asyncio
    async def test_progress_snapshots(self, square):
        lookup = ScriptedLookup(
            communes={"SCHORBACH": "57640"},
            responses={("57640", "0C", "0584"): _ok(square(7.43, 49.08, 0.001))},
        )
        records = [
            _record(section="0C", record_id="p-0"),
            _record(commune="ATLANTIS", record_id="p-1"),
        ]
        snapshots: list[list[ParcelRecord]] = []

        resolved = await _resolver(lookup).resolve_all(records, on_progress=snapshots.append)

        assert [r.status for r in resolved] == [RecordStatus.SUCCESS, RecordStatus.ERROR]
        statuses = [[r.status for r in snap] for snap in snapshots]
        assert statuses == [
            [RecordStatus.LOADING, RecordStatus.PENDING],
            [RecordStatus.SUCCESS, RecordStatus.PENDING],
            [RecordStatus.SUCCESS, RecordStatus.LOADING],
            [RecordStatus.SUCCESS, RecordStatus.ERROR],
        ]

    @pytest.mark.asyncio
    async def test_snapshots_are_independent_copies(self):
        lookup = ScriptedLookup()
        snapshots: list[list[ParcelRecord]] = []
        records = [_record(record_id="p-0"), _record(record_id="p-1")]

        await _resolver(lookup).resolve_all(records, on_progress=snapshots.append)

        assert snapshots[0] is not snapshots[1]
        assert snapshots[0][0].status == RecordStatus.LOADING
        assert [r.status for r in records] == [RecordStatus.PENDING, RecordStatus.PENDING]

    @pytest.mark.asyncio
    async def test_sequential_order(self):
        lookup = ScriptedLookup()
        records = [_record(commune=name, record_id=name) for name in ("A", "B", "C")]
        await _resolver(lookup).resolve_all(records)
        assert lookup.commune_calls == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_empty_list(self):
        assert await _resolver(ScriptedLookup()).resolve_all([]) == []
