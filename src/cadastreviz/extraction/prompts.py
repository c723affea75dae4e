"""Prompt and output schema for the LLM-backed extractor."""

from __future__ import annotations

from typing import Any

SYSTEM_PROMPT = (
    "You extract French cadastral parcel references from free text. "
    "You answer only with JSON matching the requested schema."
)

EXTRACTION_PROMPT = """Extract every French cadastral parcel reference from the text below.

Rules:
1. "numero" is the parcel number. Always give it as 4 digits, padding with
   leading zeros (584 -> 0584).
2. "section" is the section code, usually 1 or 2 letters or digits.
   "S" very often stands for "Section" and is then a marker, not part of
   the code: do not include it in the section value.
   - "SCHORBACH S C N° 0584" -> commune SCHORBACH, section C, numero 0584
   - "S AB" -> section AB
3. "commune_name" is the name of the town or village.
4. Ignore header lines and any text that is not a parcel reference.
5. Keep the parcels in the order they appear in the text.

Text:
{text}
"""

PARCEL_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "parcels": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "commune_name": {"type": "string"},
                    "section": {"type": "string"},
                    "numero": {"type": "string"},
                },
                "required": ["commune_name", "section", "numero"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["parcels"],
    "additionalProperties": False,
}


def build_extraction_prompt(text: str) -> str:
    return EXTRACTION_PROMPT.format(text=text)
