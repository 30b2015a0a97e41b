"""Static sample source returning preconfigured counts."""

from collections.abc import Mapping

from pullhistory.core.errors import FetchError


class StaticSource:
    """Fixed-count implementation of SampleSourcePort.

    Suitable for testing and offline runs. Names without a configured count
    raise FetchError, like an unreachable registry would.
    """

    def __init__(self, counts: Mapping[str, int]) -> None:
        self._counts = dict(counts)
        self.calls: list[str] = []

    async def fetch_count(self, name: str) -> int:
        """Return the configured count for the entity."""
        self.calls.append(name)
        if name not in self._counts:
            raise FetchError(name, "no count configured")
        return self._counts[name]
