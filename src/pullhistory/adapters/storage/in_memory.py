"""In-memory storage adapter for pull count history."""

from datetime import date

from pullhistory.core.errors import NotFoundError
from pullhistory.core.models import Sample
from pullhistory.core.samples import check_entity_name, next_sample


class InMemoryHistoryStorage:
    """In-memory implementation of HistoryStoragePort.

    Stores each series in a list. Suitable for testing and dry runs where
    persistence is not required.
    """

    def __init__(self) -> None:
        self._series: dict[str, list[Sample]] = {}

    def append_sample(
        self, name: str, count: int, day: date | None = None
    ) -> Sample:
        """Append a sample, computing delta against the last one."""
        name = check_entity_name(name)
        series = self._series.get(name, [])
        sample = next_sample(series[-1] if series else None, count, day)
        self._series.setdefault(name, []).append(sample)
        return sample

    def read_series(self, name: str) -> list[Sample]:
        """Return a copy of the series in append order."""
        name = check_entity_name(name)
        if name not in self._series:
            raise NotFoundError(name)
        return list(self._series[name])

    def latest(self, name: str) -> Sample | None:
        """Return the last sample, or None without history."""
        name = check_entity_name(name)
        series = self._series.get(name)
        return series[-1] if series else None
