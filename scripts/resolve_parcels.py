#!/usr/bin/env python3
"""CLI script to resolve a text file of parcel references into geometries."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Ensure the project source is importable when running the script directly.
_project_root = Path(__file__).resolve().parent.parent
_src = _project_root / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from cadastreviz.cadastre.service import create_cadastre_services  # noqa: E402
from cadastreviz.core.config import Settings  # noqa: E402
from cadastreviz.core.types import RecordStatus  # noqa: E402
from cadastreviz.export.archive import build_gpx_archive  # noqa: E402
from cadastreviz.llm.client import create_llm_client  # noqa: E402
from cadastreviz.parcels.models import RunSnapshot  # noqa: E402
from cadastreviz.parcels.store import ParcelStore  # noqa: E402
from cadastreviz.parcels.views import record_view  # noqa: E402
from cadastreviz.resolution.pipeline import ParcelPipeline  # noqa: E402
from cadastreviz.resolution.resolver import ParcelResolver  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Resolve French cadastral parcel references from a text file."
    )
    parser.add_argument(
        "input",
        type=str,
        help="Path to a text file with one parcel reference per line.",
    )
    parser.add_argument(
        "--strategy",
        choices=["pattern", "llm"],
        default=None,
        help="Extraction strategy (defaults to CADASTREVIZ_EXTRACTION_STRATEGY).",
    )
    parser.add_argument(
        "--export-dir",
        type=str,
        default=None,
        help="Directory to write the GPX zip archive into.",
    )
    return parser.parse_args()


def print_progress(snapshot: RunSnapshot) -> None:
    stats = snapshot.stats
    print(
        f"[{snapshot.status}] {snapshot.message} "
        f"({stats.success} ok, {stats.error} failed, {stats.pending} pending)"
    )


async def main() -> None:
    args = parse_args()

    # Load settings from environment.
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())

    text = Path(args.input).read_text(encoding="utf-8")

    communes, geometries = create_cadastre_services(settings)
    llm_client = create_llm_client(settings.llm)
    store = ParcelStore()
    store.subscribe(print_progress)
    pipeline = ParcelPipeline(
        resolver=ParcelResolver(communes=communes, geometries=geometries),
        store=store,
        llm_client=llm_client,
        default_strategy=settings.extraction.strategy,
    )

    try:
        snapshot = await pipeline.run(text, args.strategy)
    finally:
        await llm_client.close()
        await communes.close()
        if geometries is not communes:
            await geometries.close()

    # Print the per-record results.
    print()
    for line in snapshot.skipped_lines:
        print(f"  skipped: {line}")
    for record in snapshot.records:
        if record.status == RecordStatus.SUCCESS:
            label = record_view(record).area_label
            print(f"  OK    {record.raw_text} (INSEE {record.insee_code}) {label}")
        else:
            print(f"  FAIL  {record.raw_text}: {record.error_message}")

    if not snapshot.records:
        print(snapshot.message)
        sys.exit(1)

    # Export if requested.
    if args.export_dir:
        result = build_gpx_archive(snapshot.records)
        if result.refused:
            print(f"\n{result.notice}")
            sys.exit(1)
        target = Path(args.export_dir) / result.filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(result.content)
        print(f"\n{result.file_count} GPX tracks exported to {target}")

    sys.exit(0 if snapshot.stats.error == 0 else 1)


if __name__ == "__main__":
    asyncio.run(main())
