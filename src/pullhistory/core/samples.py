"""Helper functions for creating Sample objects."""

from datetime import date, datetime

from pullhistory.core.models import Sample

DAY_FORMAT = "%Y/%m/%d"


def format_day(day: date) -> str:
    """Format a day as YYYY/MM/DD."""
    return day.strftime(DAY_FORMAT)


def parse_day(value: str) -> date:
    """Parse a YYYY/MM/DD string into a date.

    Raises:
        ValueError: If the string does not match the format.
    """
    return datetime.strptime(value.strip(), DAY_FORMAT).date()


def check_entity_name(name: str) -> str:
    """Validate an entity name and return it stripped.

    Raises:
        ValueError: If the name is empty or blank.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Entity name must be a non-empty string, got {name!r}")
    return name.strip()


def check_count(count: int) -> int:
    """Validate a count value.

    Raises:
        ValueError: If count is not a non-negative integer.
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValueError(f"Count must be an integer, got {count!r}")
    if count < 0:
        raise ValueError(f"Count must be >= 0, got {count}")
    return count


def next_sample(
    previous: Sample | None,
    count: int,
    day: date | None = None,
) -> Sample:
    """Create the sample following `previous` in a series.

    Args:
        previous: Last stored sample, or None when there is no prior data.
        count: Current cumulative count.
        day: Observation day (default: today).

    Returns:
        Sample whose delta is count - previous.count, or 0 without prior data.
        Negative deltas are kept unchanged.
    """
    check_count(count)
    delta = count - previous.count if previous is not None else 0
    return Sample(day=day or date.today(), count=count, delta=delta)
