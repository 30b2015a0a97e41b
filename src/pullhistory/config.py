"""Watch list configuration.

The watch list is a YAML file naming the images to track, the groups whose
sums are tracked as synthetic entities, and optional release markers:

    images:
      - falcosecurity/falco
      - falcosecurity/falco-no-driver
    sums:
      - name: falco
        images: [falcosecurity/falco, falcosecurity/falco-no-driver]
    releases:
      falcosecurity/falco: {"2024/01/29": "0.37.0"}
"""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from pullhistory.core.aggregation import is_group_entity
from pullhistory.core.errors import ConfigError
from pullhistory.core.models import Group, ReleaseMarker
from pullhistory.core.samples import parse_day


@dataclass(frozen=True)
class WatchList:
    """Parsed watch list.

    Attributes:
        images: Image names in configuration order.
        groups: Groups whose sums are stored under "SUM/<name>".
        releases: Release markers keyed by entity name.
    """

    images: tuple[str, ...] = ()
    groups: tuple[Group, ...] = ()
    releases: dict[str, tuple[ReleaseMarker, ...]] = field(default_factory=dict)

    @property
    def entity_names(self) -> list[str]:
        """Every tracked entity: images first, then group series."""
        return list(self.images) + [g.entity_name for g in self.groups]


def _parse_names(value: Any, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigError(f"{where} must be a list of image names")
    names: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ConfigError(f"{where} contains an invalid image name: {item!r}")
        name = item.strip()
        if name in names:
            raise ConfigError(f"{where} lists '{name}' more than once")
        names.append(name)
    return tuple(names)


def _parse_groups(value: Any) -> tuple[Group, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigError("'sums' must be a list")
    groups: list[Group] = []
    seen: set[str] = set()
    for item in value:
        if not isinstance(item, dict):
            raise ConfigError(f"Invalid sum entry: {item!r}")
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigError(f"Sum entry without a name: {item!r}")
        name = name.strip()
        if name in seen:
            raise ConfigError(f"Sum '{name}' is defined more than once")
        seen.add(name)
        members = _parse_names(item.get("images"), f"Sum '{name}' images")
        nested = [m for m in members if is_group_entity(m)]
        if nested:
            raise ConfigError(
                f"Sum '{name}' cannot include other sums: {', '.join(nested)}"
            )
        groups.append(Group(name=name, members=members))
    return tuple(groups)


def _parse_release_day(value: Any, entity: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return parse_day(str(value))
    except ValueError:
        raise ConfigError(
            f"Invalid release date for '{entity}': {value!r} (expected YYYY/MM/DD)"
        ) from None


def _parse_releases(value: Any) -> dict[str, tuple[ReleaseMarker, ...]]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError("'releases' must map entity names to {date: version}")
    releases: dict[str, tuple[ReleaseMarker, ...]] = {}
    for entity, versions in value.items():
        if not isinstance(versions, dict):
            raise ConfigError(f"Releases for '{entity}' must map dates to versions")
        markers = [
            ReleaseMarker(day=_parse_release_day(day, entity), label=str(label))
            for day, label in versions.items()
        ]
        releases[str(entity)] = tuple(sorted(markers, key=lambda m: m.day))
    return releases


def parse_watchlist(data: Any) -> WatchList:
    """Build a WatchList from already-loaded YAML data.

    Raises:
        ConfigError: If the structure or any value is invalid.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Watch list must be a mapping with an 'images' key")
    return WatchList(
        images=_parse_names(data.get("images"), "'images'"),
        groups=_parse_groups(data.get("sums")),
        releases=_parse_releases(data.get("releases")),
    )


def load_watchlist(path: str | Path) -> WatchList:
    """Load and validate a YAML watch list file.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or does
            not describe a valid watch list.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read watch list '{path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in '{path}': {e}") from e
    return parse_watchlist(data)
