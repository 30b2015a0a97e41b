"""Static report builder: one chart per entity plus an index page."""

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from pullhistory.adapters.report.charts import render_chart
from pullhistory.adapters.report.index import write_index
from pullhistory.core.errors import HistoryIOError, NotFoundError, ParseError
from pullhistory.core.models import EntityCount, ReleaseMarker
from pullhistory.core.naming import safe_name
from pullhistory.core.ports import HistoryStoragePort

logger = logging.getLogger(__name__)


# @tra: Adapter.Report.ImplementsReportBuilderPort
class StaticReportBuilder:
    """Static files implementation of ReportBuilderPort.

    Args:
        render_dir: Directory receiving one chart image per entity.
        index_path: Path of the generated index page.
        chart_format: Image format extension for charts (default: "png").
    """

    def __init__(
        self,
        render_dir: str | Path,
        index_path: str | Path = "index.html",
        chart_format: str = "png",
    ) -> None:
        self._render_dir = Path(render_dir)
        self._index_path = Path(index_path)
        self._chart_format = chart_format

    def chart_path(self, name: str) -> Path:
        """Return the chart file path for an entity."""
        return self._render_dir / f"{safe_name(name)}.{self._chart_format}"

    def _chart_link(self, chart: Path) -> str:
        """Return the chart location relative to the index page."""
        relative = os.path.relpath(chart.resolve(), self._index_path.resolve().parent)
        return Path(relative).as_posix()

    def build(
        self,
        storage: HistoryStoragePort,
        names: Iterable[str],
        releases: Mapping[str, Iterable[ReleaseMarker]] | None = None,
        refresh: Iterable[str] | None = None,
    ) -> None:
        """Render charts for readable series, then the index page.

        Entities whose series is missing or unreadable are logged and left
        out; the remaining charts and the index are still written. Entities
        not in `refresh` keep their existing chart, if any.
        """
        releases = releases or {}
        to_refresh = None if refresh is None else set(refresh)
        entities: list[EntityCount] = []
        links: dict[str, str] = {}

        for name in names:
            try:
                series = storage.read_series(name)
            except (NotFoundError, ParseError, HistoryIOError) as e:
                logger.warning("Skipping '%s' in report: %s", name, e)
                continue
            if not series:
                logger.warning("Skipping '%s' in report: empty history", name)
                continue
            entities.append(EntityCount(name, series[-1].count))

            chart = self.chart_path(name)
            if to_refresh is None or name in to_refresh:
                logger.info("Writing the chart for '%s' in '%s'", name, chart)
                render_chart(name, series, chart, releases.get(name, ()))
            elif not chart.exists():
                continue
            links[name] = self._chart_link(chart)

        logger.info("Writing the index in '%s'", self._index_path)
        write_index(self._index_path, entities, links)
