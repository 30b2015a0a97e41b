"""BDD step definitions for history and group sum features."""

import asyncio
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, then, when

from pullhistory.adapters.sources.static import StaticSource
from pullhistory.adapters.storage.csv_file import ON_CORRUPT_WARN, CSVHistoryStorage
from pullhistory.adapters.storage.in_memory import InMemoryHistoryStorage
from pullhistory.core.aggregation import compute_group_count
from pullhistory.core.errors import ParseError
from pullhistory.core.ingestion import run_ingestion
from pullhistory.core.models import Group
from pullhistory.core.samples import parse_day


@dataclass
class HistoryScenarioContext:
    """State shared between the steps of one scenario."""

    data_dir: Path
    storage: CSVHistoryStorage
    counts: dict[str, int] = field(default_factory=dict)
    original_text: dict[str, str] = field(default_factory=dict)
    error: Exception | None = None
    group_count: int | None = None
    memory: InMemoryHistoryStorage = field(default_factory=InMemoryHistoryStorage)


@pytest.fixture
def ctx(tmp_path: Path) -> HistoryScenarioContext:
    """Fresh scenario context for each test."""
    data_dir = tmp_path / "data"
    return HistoryScenarioContext(data_dir=data_dir, storage=CSVHistoryStorage(data_dir))


def _names(text: str) -> list[str]:
    return [name.strip() for name in text.split(",") if name.strip()]


# === History Steps ===
@given("an empty data directory")
def step_empty_data_dir(ctx: HistoryScenarioContext) -> None:
    assert not ctx.data_dir.exists()


@given(parsers.parse('the series file for "{name}" contains'))
def step_series_file_contains(
    ctx: HistoryScenarioContext, name: str, docstring: str
) -> None:
    path = ctx.storage.path_for(name)
    path.parent.mkdir(parents=True, exist_ok=True)
    text = docstring + "\n"
    path.write_text(text, encoding="utf-8")
    ctx.original_text[name] = text


@given("corrupt rows are tolerated")
def step_tolerate_corrupt(ctx: HistoryScenarioContext) -> None:
    ctx.storage = CSVHistoryStorage(ctx.data_dir, on_corrupt=ON_CORRUPT_WARN)


@given(parsers.parse('the count {count:d} is recorded for "{name}" on {day}'))
@when(parsers.parse('the count {count:d} is recorded for "{name}" on {day}'))
def step_record_count(
    ctx: HistoryScenarioContext, count: int, name: str, day: str
) -> None:
    try:
        ctx.storage.append_sample(name, count, parse_day(day))
    except ParseError as e:
        ctx.error = e


@then(parsers.parse('the series file for "{name}" reads'))
def then_series_file_reads(
    ctx: HistoryScenarioContext, name: str, docstring: str
) -> None:
    text = ctx.storage.path_for(name).read_text(encoding="utf-8")
    assert text == docstring + "\n"


@then(parsers.parse('the latest sample for "{name}" is {count:d} with delta {delta:d}'))
def then_latest_sample(
    ctx: HistoryScenarioContext, name: str, count: int, delta: int
) -> None:
    sample = ctx.storage.latest(name)
    assert sample is not None
    assert (sample.count, sample.delta) == (count, delta)


@then(parsers.parse('the series for "{name}" has {n:d} samples'))
def then_series_length(ctx: HistoryScenarioContext, name: str, n: int) -> None:
    assert len(ctx.storage.read_series(name)) == n


@then("recording fails with a parse error")
def then_parse_error(ctx: HistoryScenarioContext) -> None:
    assert isinstance(ctx.error, ParseError)


@then(parsers.parse('the series file for "{name}" is unchanged'))
def then_series_unchanged(ctx: HistoryScenarioContext, name: str) -> None:
    text = ctx.storage.path_for(name).read_text(encoding="utf-8")
    assert text == ctx.original_text[name]


@then(parsers.parse('the last row of "{name}" is "{row}"'))
def then_last_row(ctx: HistoryScenarioContext, name: str, row: str) -> None:
    lines = ctx.storage.path_for(name).read_text(encoding="utf-8").splitlines()
    assert lines[-1] == row


@then(parsers.parse('the data directory holds "{filename}"'))
def then_data_dir_holds(ctx: HistoryScenarioContext, filename: str) -> None:
    assert [p.name for p in ctx.data_dir.iterdir()] == [filename]


# === Group Steps ===
@given(parsers.parse('the latest count of "{name}" is {count:d}'))
def step_latest_count(ctx: HistoryScenarioContext, name: str, count: int) -> None:
    ctx.counts[name] = count


@when(parsers.parse('the group "{group}" of "{members}" is computed'))
def when_group_computed(
    ctx: HistoryScenarioContext, group: str, members: str
) -> None:
    ctx.group_count = compute_group_count(group, _names(members), ctx.counts.get)


@when(
    parsers.parse(
        'an ingestion run covers "{images}" with the group "{group}" of "{members}"'
    )
)
def when_ingestion_run(
    ctx: HistoryScenarioContext, images: str, group: str, members: str
) -> None:
    run = asyncio.run(
        run_ingestion(
            _names(images),
            [Group(group, tuple(_names(members)))],
            StaticSource(ctx.counts),
            ctx.memory,
            date(2025, 1, 1),
        )
    )
    assert run.ok


@then(parsers.parse("the group count is {count:d}"))
def then_group_count(ctx: HistoryScenarioContext, count: int) -> None:
    assert ctx.group_count == count


@then(parsers.parse('the history of "{name}" ends with {count:d}'))
def then_history_ends_with(ctx: HistoryScenarioContext, name: str, count: int) -> None:
    sample = ctx.memory.latest(name)
    assert sample is not None
    assert sample.count == count
