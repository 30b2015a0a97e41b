"""Port interfaces for storage, sample source and report adapters.

These protocols define the contracts that adapters must implement.
The core ingestion logic depends only on these interfaces, not concrete
implementations.
"""

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Protocol, runtime_checkable

from pullhistory.core.models import ReleaseMarker, Sample


@runtime_checkable
class HistoryStoragePort(Protocol):
    """Port for per-entity append-only series storage.

    Adapters implementing this protocol own one series per entity name.
    Examples: CSVHistoryStorage, InMemoryHistoryStorage.
    """

    def append_sample(
        self, name: str, count: int, day: date | None = None
    ) -> Sample:
        """Append today's count and return the stored sample.

        Args:
            name: Entity name (e.g., "falcosecurity/falco").
            count: Current cumulative count, must be >= 0.
            day: Observation day. Defaults to today.

        Returns:
            The appended Sample, with delta computed against the last one.

        Raises:
            HistoryIOError: The series cannot be created or appended.
            ParseError: The last stored record is malformed.
        """
        ...

    def read_series(self, name: str) -> list[Sample]:
        """Read the full series in append order.

        Raises:
            NotFoundError: No series exists for this entity.
            ParseError: A stored record is malformed.
        """
        ...

    def latest(self, name: str) -> Sample | None:
        """Return the last sample, or None when there is no history yet."""
        ...


@runtime_checkable
class SampleSourcePort(Protocol):
    """Port for fetching an entity's current count.

    Examples: DockerHubSource, StaticSource.
    """

    async def fetch_count(self, name: str) -> int:
        """Return the current count for the entity.

        Raises:
            FetchError: The count is unavailable or unparseable.
        """
        ...


@runtime_checkable
class ReportBuilderPort(Protocol):
    """Port for rendering charts and the index from stored history."""

    def build(
        self,
        storage: HistoryStoragePort,
        names: Iterable[str],
        releases: Mapping[str, Iterable[ReleaseMarker]] | None = None,
        refresh: Iterable[str] | None = None,
    ) -> None:
        """Render charts and an index listing every entity.

        Args:
            storage: Storage to read each series from.
            names: Entities to list, in display order.
            releases: Release markers keyed by entity name.
            refresh: Entities whose chart is redrawn. None redraws all.
        """
        ...
