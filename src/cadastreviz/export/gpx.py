"""GPX track documents for resolved parcels."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from cadastreviz.core.types import RecordStatus
from cadastreviz.geometry.tracks import track_segments
from cadastreviz.parcels.models import ParcelRecord

GPX_NAMESPACE = "http://www.topografix.com/GPX/1/1"
GPX_CREATOR = "CadastreViz"

ET.register_namespace("", GPX_NAMESPACE)


def _tag(name: str) -> str:
    return f"{{{GPX_NAMESPACE}}}{name}"


def gpx_filename(name: str) -> str:
    """File name for a track: whitespace to underscores, unsafe characters dropped."""
    collapsed = re.sub(r"\s+", "_", name.strip())
    return re.sub(r"[^a-zA-Z0-9_.\-]", "", collapsed) + ".gpx"


def render_gpx(record: ParcelRecord) -> bytes:
    """Render one self-contained GPX 1.1 document for a successful record.

    The document holds a single track with one segment per ring.
    """
    if record.status != RecordStatus.SUCCESS or record.geometry is None:
        raise ValueError(f"Record {record.id!r} has no geometry to export")

    name = record.raw_text
    root = ET.Element(_tag("gpx"), {"version": "1.1", "creator": GPX_CREATOR})
    metadata = ET.SubElement(root, _tag("metadata"))
    ET.SubElement(metadata, _tag("name")).text = name

    track = ET.SubElement(root, _tag("trk"))
    ET.SubElement(track, _tag("name")).text = name
    for segment in track_segments(record.geometry):
        trkseg = ET.SubElement(track, _tag("trkseg"))
        for point in segment:
            trkpt = ET.SubElement(
                trkseg, _tag("trkpt"), {"lat": repr(point.lat), "lon": repr(point.lon)}
            )
            ET.SubElement(trkpt, _tag("ele")).text = f"{point.ele:g}"

    return ET.tostring(root, encoding="UTF-8", xml_declaration=True)
