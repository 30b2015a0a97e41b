"""One ingestion run: fetch counts, append samples, compute group sums."""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date

from pullhistory.core.aggregation import compute_group_count
from pullhistory.core.errors import FetchError, HistoryIOError, ParseError
from pullhistory.core.models import EntityCount, Group, Sample
from pullhistory.core.ports import HistoryStoragePort, SampleSourcePort

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 4


@dataclass
class IngestionRun:
    """Result of a single ingestion run.

    Attributes:
        observed: Counts observed this run, images first then groups,
            in configuration order.
        samples: Samples appended this run, keyed by entity name.
        failures: Per-entity failures, keyed by entity name.
    """

    observed: dict[str, int] = field(default_factory=dict)
    samples: dict[str, Sample] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True if no entity failed."""
        return not self.failures

    def entity_counts(self) -> list[EntityCount]:
        """Observed counts as EntityCount objects, in observation order."""
        return [EntityCount(name, count) for name, count in self.observed.items()]


async def _fetch_all(
    names: Sequence[str],
    source: SampleSourcePort,
    concurrency: int,
) -> list[int | BaseException]:
    """Fetch every count, at most `concurrency` requests at a time."""
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def fetch(name: str) -> int:
        async with semaphore:
            logger.info("Scraping pull count for '%s'", name)
            return await source.fetch_count(name)

    return await asyncio.gather(
        *(fetch(name) for name in names), return_exceptions=True
    )


def _append(
    run: IngestionRun,
    storage: HistoryStoragePort,
    name: str,
    count: int,
    day: date | None,
) -> None:
    """Append one sample, recording the failure instead of raising."""
    try:
        sample = storage.append_sample(name, count, day)
    except (HistoryIOError, ParseError) as e:
        logger.error("Skipping history update for '%s': %s", name, e)
        run.failures[name] = e
        return
    run.samples[name] = sample
    logger.info(
        "Appended sample for '%s': count=%d delta=%d", name, sample.count, sample.delta
    )


def _make_lookup(run: IngestionRun, storage: HistoryStoragePort):
    """Build a latest-count lookup preferring this run's observations."""

    def lookup(name: str) -> int | None:
        if name in run.observed:
            return run.observed[name]
        try:
            sample = storage.latest(name)
        except (HistoryIOError, ParseError) as e:
            logger.warning("Cannot read latest count for '%s': %s", name, e)
            return None
        if sample is not None:
            logger.info("Using stored count for '%s' from %s", name, sample.day)
            return sample.count
        return None

    return lookup


async def run_ingestion(
    images: Iterable[str],
    groups: Iterable[Group],
    source: SampleSourcePort,
    storage: HistoryStoragePort,
    day: date | None = None,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> IngestionRun:
    """Run one ingestion pass over the watch list.

    Failures are isolated per entity: a FetchError skips that image, a
    storage error skips its history update, and every other entity is still
    processed. Group sums are computed only after every image is handled.

    Args:
        images: Image names to scrape.
        groups: Groups whose sums are stored under "SUM/<name>".
        source: Sample source adapter.
        storage: History storage adapter.
        day: Observation day (default: today).
        concurrency: Maximum concurrent fetches.

    Returns:
        IngestionRun describing what was observed, appended and skipped.
    """
    run = IngestionRun()
    names = list(images)
    day = day or date.today()

    results = await _fetch_all(names, source, concurrency)
    for name, result in zip(names, results):
        if isinstance(result, FetchError):
            logger.error("Skipping '%s': %s", name, result)
            run.failures[name] = result
            continue
        if isinstance(result, BaseException):
            raise result
        run.observed[name] = result
        _append(run, storage, name, result, day)

    lookup = _make_lookup(run, storage)
    group_counts = [
        (group, compute_group_count(group.name, group.members, lookup))
        for group in groups
    ]
    for group, count in group_counts:
        run.observed[group.entity_name] = count
        _append(run, storage, group.entity_name, count, day)

    return run
