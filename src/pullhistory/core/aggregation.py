"""Aggregation of image counts into named group sums."""

import logging
from collections.abc import Callable, Iterable

from pullhistory.core.models import GROUP_PREFIX

logger = logging.getLogger(__name__)

LatestLookup = Callable[[str], int | None]


def group_entity_name(group_name: str) -> str:
    """Return the series name of a group (e.g., "falco" -> "SUM/falco")."""
    return f"{GROUP_PREFIX}{group_name}"


def is_group_entity(name: str) -> bool:
    """Return True if the entity name belongs to a group series."""
    return name.startswith(GROUP_PREFIX)


def compute_group_count(
    group_name: str,
    member_names: Iterable[str],
    latest_lookup: LatestLookup,
) -> int:
    """Sum the latest known counts of a group's members.

    Args:
        group_name: Group name, used for logging only.
        member_names: Names of the member images.
        latest_lookup: Returns a member's latest count, or None if it has
            never been observed.

    Returns:
        Sum of the observed members' counts. Unobserved members contribute 0;
        an empty member list yields 0.
    """
    total = 0
    for member in member_names:
        count = latest_lookup(member)
        if count is None:
            logger.debug(
                "Group '%s': no observation for member '%s', skipping",
                group_name,
                member,
            )
            continue
        total += count
    return total
