"""Shared test fixtures for all test modules."""

from collections.abc import AsyncGenerator, Callable, Mapping
from pathlib import Path

import httpx
import pytest

from pullhistory.adapters.sources.dockerhub import DockerHubSource
from pullhistory.adapters.sources.static import StaticSource
from pullhistory.adapters.storage.csv_file import CSVHistoryStorage
from pullhistory.adapters.storage.in_memory import InMemoryHistoryStorage
from tests.registry_helpers import dockerhub_handler


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Provide a temporary data directory for CSV series."""
    return tmp_path / "data"


@pytest.fixture
def csv_storage(data_dir: Path) -> CSVHistoryStorage:
    """CSV storage over an empty temporary data directory."""
    return CSVHistoryStorage(data_dir)


@pytest.fixture
def memory_storage() -> InMemoryHistoryStorage:
    """Fixture providing an empty in-memory history storage."""
    return InMemoryHistoryStorage()


@pytest.fixture
def static_source() -> Callable[[Mapping[str, int]], StaticSource]:
    """Factory fixture for a StaticSource with fixed counts."""

    def _source(counts: Mapping[str, int]) -> StaticSource:
        return StaticSource(counts)

    return _source


@pytest.fixture
def dockerhub_source() -> Callable[..., DockerHubSource]:
    """Factory fixture for a DockerHubSource backed by a mock transport.

    Usage:
        async def test_something(dockerhub_source):
            async with dockerhub_source({"org/image": 42}) as source:
                count = await source.fetch_count("org/image")
    """

    def _source(
        counts: Mapping[str, int | None],
        status: Mapping[str, int] | None = None,
    ) -> DockerHubSource:
        transport = httpx.MockTransport(dockerhub_handler(counts, status))
        return DockerHubSource(transport=transport)

    return _source


@pytest.fixture
async def falco_source(dockerhub_source) -> AsyncGenerator[DockerHubSource, None]:
    """DockerHubSource knowing two falco images, closed after the test."""
    source = dockerhub_source(
        {"falcosecurity/falco": 1000, "falcosecurity/falco-no-driver": 250}
    )
    yield source
    await source.aclose()
