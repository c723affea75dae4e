"""Cadastre lookup data models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class Commune(BaseModel):
    """Best population-ranked geocoding match for a commune name."""

    code: str
    nom: str = ""


class CadastreResponse(BaseModel):
    """Outcome of one geometry lookup request.

    ``ok`` mirrors the HTTP success of the request; ``data`` holds the
    decoded GeoJSON body when ``ok`` is true.
    """

    ok: bool
    status_code: int
    data: dict[str, Any] | None = None
