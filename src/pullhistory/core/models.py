"""Core domain models for pull count history."""

from dataclasses import dataclass
from datetime import date

# Namespace separating group series from plain image series
GROUP_PREFIX = "SUM/"


@dataclass(frozen=True)
class Sample:
    """A single daily observation of an entity's pull count.

    Attributes:
        day: Calendar day the observation was taken.
        count: Cumulative pull count on that day.
        delta: Difference with the previous sample's count (0 for the first).
    """

    day: date
    count: int
    delta: int


@dataclass(frozen=True)
class Group:
    """A named sum over the latest counts of several images.

    Attributes:
        name: Group name (e.g., "falco").
        members: Image names whose latest counts are summed.
    """

    name: str
    members: tuple[str, ...] = ()

    @property
    def entity_name(self) -> str:
        """Name under which the group's own series is stored."""
        return f"{GROUP_PREFIX}{self.name}"


@dataclass(frozen=True)
class ReleaseMarker:
    """A release annotation drawn on an entity's chart."""

    day: date
    label: str


@dataclass(frozen=True)
class EntityCount:
    """An entity name with its latest count, as listed on the index page."""

    name: str
    count: int
