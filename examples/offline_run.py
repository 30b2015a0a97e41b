"""Run a week of ingestion against fixed counts and build the report.

Nothing is fetched from Docker Hub: a StaticSource replays made-up counts
into an in-memory history, then the static report is written to ./render.

Run with:
    python examples/offline_run.py
"""

import asyncio
import logging
from datetime import date, timedelta

from pullhistory.adapters.report.builder import StaticReportBuilder
from pullhistory.adapters.sources.static import StaticSource
from pullhistory.adapters.storage.in_memory import InMemoryHistoryStorage
from pullhistory.core.ingestion import run_ingestion
from pullhistory.core.models import Group, ReleaseMarker

IMAGES = ["example/api", "example/worker"]
GROUPS = [Group("example", tuple(IMAGES))]
START = date(2025, 1, 1)


async def main() -> None:
    storage = InMemoryHistoryStorage()
    for offset in range(7):
        counts = {"example/api": 1000 + 150 * offset, "example/worker": 400 + 40 * offset}
        await run_ingestion(
            IMAGES, GROUPS, StaticSource(counts), storage, START + timedelta(days=offset)
        )

    builder = StaticReportBuilder("render", "index.html")
    names = [*IMAGES, *(group.entity_name for group in GROUPS)]
    releases = {"example/api": [ReleaseMarker(START + timedelta(days=3), "1.1.0")]}
    builder.build(storage, names, releases=releases)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
