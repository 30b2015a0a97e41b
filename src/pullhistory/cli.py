"""Command-line entry point.

Example:
    pullhistory -l watchlist.yaml -d ./data -r ./render --index index.html
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from pullhistory.adapters.report.builder import StaticReportBuilder
from pullhistory.adapters.sources.dockerhub import DEFAULT_TIMEOUT, DockerHubSource
from pullhistory.adapters.storage.csv_file import (
    ON_CORRUPT_RAISE,
    ON_CORRUPT_WARN,
    CSVHistoryStorage,
)
from pullhistory.config import WatchList, load_watchlist
from pullhistory.core.errors import ConfigError
from pullhistory.core.ingestion import DEFAULT_CONCURRENCY, IngestionRun, run_ingestion
from pullhistory.core.ports import (
    HistoryStoragePort,
    ReportBuilderPort,
    SampleSourcePort,
)

logger = logging.getLogger("pullhistory")

EXIT_OK = 0
EXIT_PARTIAL_FAILURE = 1
EXIT_CONFIG_ERROR = 2

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pullhistory",
        description="Track Docker Hub pull counts as daily CSV history and charts.",
    )
    parser.add_argument(
        "-l", "--list", required=True, dest="watchlist",
        help="YAML file with the list of images to track",
    )
    parser.add_argument(
        "-d", "--data-dir", default="./data", help="Destination folder for .csv"
    )
    parser.add_argument(
        "-r", "--render-dir", default="./render", help="Destination folder for charts"
    )
    parser.add_argument(
        "--index", default="index.html", help="Path of the generated index page"
    )
    parser.add_argument(
        "--no-report", action="store_true", help="Only update history, skip charts"
    )
    parser.add_argument(
        "--tolerate-corrupt",
        action="store_true",
        help="Append with no prior data when a series' last row is malformed",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=DEFAULT_CONCURRENCY,
        help=f"Maximum concurrent registry requests (default: {DEFAULT_CONCURRENCY})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Registry request timeout in seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


async def ingest(
    watchlist: WatchList,
    storage: HistoryStoragePort,
    source: SampleSourcePort,
    report: ReportBuilderPort | None,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> IngestionRun:
    """Run ingestion over the watch list, then build the report if requested.

    Charts are redrawn only for entities appended this run; failed entities
    keep their previous chart.
    """
    run = await run_ingestion(
        watchlist.images,
        watchlist.groups,
        source,
        storage,
        concurrency=concurrency,
    )
    if report is not None:
        report.build(
            storage, watchlist.entity_names, watchlist.releases, refresh=run.samples
        )
    return run


async def _main(args: argparse.Namespace, watchlist: WatchList) -> IngestionRun:
    storage = CSVHistoryStorage(
        args.data_dir,
        on_corrupt=ON_CORRUPT_WARN if args.tolerate_corrupt else ON_CORRUPT_RAISE,
    )
    report = None if args.no_report else StaticReportBuilder(args.render_dir, args.index)
    async with DockerHubSource(timeout=args.timeout) as source:
        return await ingest(watchlist, storage, source, report, args.concurrency)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT
    )

    try:
        watchlist = load_watchlist(args.watchlist)
    except ConfigError as e:
        logger.error("%s", e)
        return EXIT_CONFIG_ERROR

    run = asyncio.run(_main(args, watchlist))
    if not run.ok:
        logger.warning(
            "%d of %d entities failed: %s",
            len(run.failures),
            len(watchlist.entity_names),
            ", ".join(run.failures),
        )
        return EXIT_PARTIAL_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
