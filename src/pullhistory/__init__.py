"""pullhistory - daily pull count history for container images.

Polls a registry for image pull counts, appends one sample per image per run
to an append-only CSV series, sums named groups of images, and renders charts
plus an index page from the stored history.
"""

from pullhistory.adapters.storage import CSVHistoryStorage, InMemoryHistoryStorage
from pullhistory.core.aggregation import compute_group_count, group_entity_name
from pullhistory.core.errors import (
    ConfigError,
    FetchError,
    HistoryIOError,
    NotFoundError,
    ParseError,
    PullHistoryError,
)
from pullhistory.core.ingestion import IngestionRun, run_ingestion
from pullhistory.core.models import EntityCount, Group, ReleaseMarker, Sample

__all__ = [
    "CSVHistoryStorage",
    "ConfigError",
    "EntityCount",
    "FetchError",
    "Group",
    "HistoryIOError",
    "InMemoryHistoryStorage",
    "IngestionRun",
    "NotFoundError",
    "ParseError",
    "PullHistoryError",
    "ReleaseMarker",
    "Sample",
    "compute_group_count",
    "group_entity_name",
    "run_ingestion",
]
