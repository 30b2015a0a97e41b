"""Tests for the static report builder."""

from datetime import date, timedelta
from pathlib import Path

import pytest

from pullhistory.adapters.report.builder import StaticReportBuilder
from pullhistory.adapters.report.charts import markers_in_range, render_chart
from pullhistory.adapters.storage.csv_file import CSVHistoryStorage
from pullhistory.adapters.storage.in_memory import InMemoryHistoryStorage
from pullhistory.core.models import ReleaseMarker, Sample

pytestmark = [
    pytest.mark.tier(2),
    pytest.mark.tra("Adapter.Report.ImplementsReportBuilderPort"),
]

DAY = date(2025, 1, 1)


def _fill(storage, name: str, counts: list[int]) -> None:
    for i, count in enumerate(counts):
        storage.append_sample(name, count, DAY + timedelta(days=i))


class TestMarkersInRange:
    """Tests for markers_in_range()."""

    def test_keeps_markers_inside_series_range(self) -> None:
        """Markers before the first or after the last sample are dropped."""
        series = [Sample(DAY, 1, 0), Sample(DAY + timedelta(days=10), 2, 1)]
        markers = [
            ReleaseMarker(DAY - timedelta(days=1), "old"),
            ReleaseMarker(DAY + timedelta(days=5), "mid"),
            ReleaseMarker(DAY, "first"),
            ReleaseMarker(DAY + timedelta(days=11), "future"),
        ]

        assert [m.label for m in markers_in_range(markers, series)] == ["first", "mid"]

    def test_empty_series_has_no_markers(self) -> None:
        """No series means nothing to annotate."""
        assert markers_in_range([ReleaseMarker(DAY, "x")], []) == []


class TestRenderChart:
    """Tests for render_chart()."""

    def test_writes_image(self, tmp_path: Path) -> None:
        """A chart image is written to the requested path."""
        series = [Sample(DAY, 100, 0), Sample(DAY + timedelta(days=1), 130, 30)]
        out = tmp_path / "charts" / "x.png"

        render_chart("x", series, out, [ReleaseMarker(DAY, "1.0.0")])

        assert out.read_bytes().startswith(b"\x89PNG")

    def test_empty_series_raises(self, tmp_path: Path) -> None:
        """An empty series cannot be plotted."""
        with pytest.raises(ValueError, match="No samples"):
            render_chart("x", [], tmp_path / "x.png")


class TestStaticReportBuilder:
    """Tests for StaticReportBuilder.build()."""

    def test_writes_chart_per_entity_and_index(self, tmp_path: Path) -> None:
        """Every entity with history gets a chart and an index entry."""
        storage = InMemoryHistoryStorage()
        _fill(storage, "org/image", [100, 150])
        _fill(storage, "SUM/group", [1000, 1200])
        builder = StaticReportBuilder(tmp_path / "render", tmp_path / "index.html")

        builder.build(storage, ["org/image", "SUM/group"])

        assert (tmp_path / "render" / "org_image.png").exists()
        assert (tmp_path / "render" / "SUM_group.png").exists()
        html = (tmp_path / "index.html").read_text()
        assert 'href="render/org_image.png"' in html
        assert 'href="render/SUM_group.png"' in html
        assert "1,200" in html

    def test_missing_and_corrupt_series_are_skipped(self, tmp_path: Path) -> None:
        """Unreadable entities are left out, the rest is still rendered."""
        storage = CSVHistoryStorage(tmp_path / "data")
        _fill(storage, "org/good", [1, 2])
        (tmp_path / "data" / "org_bad.csv").write_text("Date,Count,Delta\nbroken\n")
        builder = StaticReportBuilder(tmp_path / "render", tmp_path / "index.html")

        builder.build(storage, ["org/good", "org/bad", "org/missing"])

        assert sorted(p.name for p in (tmp_path / "render").iterdir()) == ["org_good.png"]
        html = (tmp_path / "index.html").read_text()
        assert "org/good" in html
        assert "org/bad" not in html
        assert "org/missing" not in html

    def test_refresh_limits_redrawn_charts(self, tmp_path: Path) -> None:
        """Entities outside `refresh` keep their chart and stay listed."""
        storage = InMemoryHistoryStorage()
        _fill(storage, "org/a", [1, 2])
        _fill(storage, "org/b", [3, 4])
        builder = StaticReportBuilder(tmp_path / "render", tmp_path / "index.html")
        builder.build(storage, ["org/a", "org/b"])
        stale = builder.chart_path("org/b")
        stale.write_bytes(b"previous chart")

        builder.build(storage, ["org/a", "org/b"], refresh=["org/a"])

        assert stale.read_bytes() == b"previous chart"
        assert 'href="render/org_b.png"' in (tmp_path / "index.html").read_text()

    def test_entity_without_chart_listed_without_link(self, tmp_path: Path) -> None:
        """A listed entity not refreshed and never drawn has no chart link."""
        storage = InMemoryHistoryStorage()
        _fill(storage, "org/a", [5])
        builder = StaticReportBuilder(tmp_path / "render", tmp_path / "index.html")

        builder.build(storage, ["org/a"], refresh=[])

        html = (tmp_path / "index.html").read_text()
        assert "org/a" in html
        assert "org_a.png" not in html

    def test_index_in_subdirectory_links_relatively(self, tmp_path: Path) -> None:
        """Chart links are relative to the index location."""
        storage = InMemoryHistoryStorage()
        _fill(storage, "org/a", [5])
        builder = StaticReportBuilder(tmp_path / "render", tmp_path / "site" / "index.html")

        builder.build(storage, ["org/a"])

        assert 'href="../render/org_a.png"' in (tmp_path / "site" / "index.html").read_text()

    def test_tolerated_corrupt_row_keeps_entity_in_report(self, tmp_path: Path) -> None:
        """Appends after a tolerated corrupt row still get a chart and index row."""
        data = tmp_path / "data"
        data.mkdir()
        (data / "a_x.csv").write_text("Date,Count,Delta\n2025/01/01,abc,0\n")
        storage = CSVHistoryStorage(data, on_corrupt="warn")
        storage.append_sample("a/x", 130, DAY + timedelta(days=1))
        storage.append_sample("a/x", 150, DAY + timedelta(days=2))
        builder = StaticReportBuilder(tmp_path / "render", tmp_path / "index.html")

        builder.build(storage, ["a/x"])

        assert (tmp_path / "render" / "a_x.png").exists()
        html = (tmp_path / "index.html").read_text()
        assert 'href="render/a_x.png"' in html
        assert "150" in html
