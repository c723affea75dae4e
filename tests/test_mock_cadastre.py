"""Tests for the mock cadastre service."""

from __future__ import annotations

import pytest

from cadastreviz.geometry.area import geometry_area


class TestMockCommuneLookup:
    @pytest.mark.asyncio
    async def test_find_commune(self, cadastre):
        commune = await cadastre.find_commune("SCHORBACH")
        assert commune is not None
        assert commune.code == "57640"

    @pytest.mark.asyncio
    async def test_find_commune_accent_variants(self, cadastre):
        with_accent = await cadastre.find_commune("Nousseviller-lès-Bitche")
        without = await cadastre.find_commune("NOUSSEVILLER-LES-BITCHE")
        assert with_accent.code == without.code == "57508"

    @pytest.mark.asyncio
    async def test_unknown_commune(self, cadastre):
        assert await cadastre.find_commune("ATLANTIS") is None

    @pytest.mark.asyncio
    async def test_is_available(self, cadastre):
        assert await cadastre.is_available() is True


class TestMockParcelLookup:
    @pytest.mark.asyncio
    async def test_fixture_parcels_accessible(self, cadastre):
        keys = [("57640", "0C", "0584"), ("57508", "10", "0123"), ("57394", "0B", "0045")]
        for key in keys:
            response = await cadastre.fetch_parcel(*key)
            assert response.ok
            assert len(response.data["features"]) == 1
            assert geometry_area(response.data) > 0

    @pytest.mark.asyncio
    async def test_single_char_section_rejected(self, cadastre):
        response = await cadastre.fetch_parcel("57640", "C", "0584")
        assert response.ok is False
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_parcel_is_empty_collection(self, cadastre):
        response = await cadastre.fetch_parcel("57640", "0Z", "9999")
        assert response.ok is True
        assert response.data == {"type": "FeatureCollection", "features": []}
