"""CSV file storage adapter for pull count history.

Each entity owns one append-only text file under the data directory:

    Date,Count,Delta
    2025/01/01,100,0
    2025/01/02,130,30
"""

import logging
import os
from collections.abc import Iterator, Sequence
from datetime import date
from pathlib import Path

from pullhistory.core.encoding.csv_rows import (
    HEADER,
    decode_count,
    decode_row,
    decode_rows,
    decode_text,
    encode_sample,
    is_header,
)
from pullhistory.core.errors import HistoryIOError, NotFoundError, ParseError
from pullhistory.core.models import Sample
from pullhistory.core.naming import safe_name
from pullhistory.core.samples import check_count, check_entity_name, next_sample

logger = logging.getLogger(__name__)

ON_CORRUPT_RAISE = "raise"
ON_CORRUPT_WARN = "warn"


def _write_all(fd: int, data: bytes) -> None:
    """Write every byte of data, looping over short writes."""
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        view = view[written:]


def _data_rows_from_end(
    lines: Sequence[bytes], path: Path
) -> Iterator[tuple[int, str]]:
    """Yield (line number, text) of data rows, last row first.

    Lines are decoded lazily, so an undecodable line only raises once reached.
    """
    for index in range(len(lines) - 1, -1, -1):
        if not lines[index].strip():
            continue
        line = decode_text(lines[index], path, index + 1)
        if not is_header(line):
            yield index + 1, line


# @tra: Adapter.CSVStorage.ImplementsHistoryStoragePort
# @tra: Adapter.CSVStorage.AppendOnly
class CSVHistoryStorage:
    """CSV file implementation of HistoryStoragePort.

    One file per entity, named after the entity with path separators
    replaced by underscores. Rows are only ever appended; existing rows are
    never rewritten.

    Appends are all-or-nothing: a failed write is rolled back to the file's
    previous size, and a file created by the failed append is removed.

    Args:
        data_dir: Directory holding the series files. Created on first write.
        on_corrupt: What to do with malformed stored records. "raise"
            (default) raises ParseError. "warn" logs a warning instead: an
            append treats the series as having no prior data (delta 0) and
            read_series() leaves the malformed rows out.
    """

    def __init__(self, data_dir: str | Path, on_corrupt: str = ON_CORRUPT_RAISE) -> None:
        if on_corrupt not in (ON_CORRUPT_RAISE, ON_CORRUPT_WARN):
            raise ValueError(
                f"on_corrupt must be '{ON_CORRUPT_RAISE}' or '{ON_CORRUPT_WARN}', "
                f"got {on_corrupt!r}"
            )
        self._data_dir = Path(data_dir)
        self._on_corrupt = on_corrupt

    @property
    def data_dir(self) -> Path:
        """Directory holding the series files."""
        return self._data_dir

    def path_for(self, name: str) -> Path:
        """Return the series file path for an entity."""
        return self._data_dir / f"{safe_name(check_entity_name(name))}.csv"

    def append_sample(
        self, name: str, count: int, day: date | None = None
    ) -> Sample:
        """Append a sample, computing delta against the last stored row."""
        name = check_entity_name(name)
        check_count(count)
        path = self.path_for(name)
        logger.info("Writing the .csv for '%s' in '%s'", name, path)

        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise HistoryIOError(
                f"Cannot create data directory {self._data_dir}: {e}"
            ) from e

        created = not path.exists()
        previous: Sample | None = None
        prefix = HEADER + "\n" if created else ""
        if not created:
            content = self._read_bytes(path)
            if not content.strip():
                prefix = HEADER + "\n"
            elif not content.endswith(b"\n"):
                prefix = "\n"
            previous = self._previous_for_append(content.split(b"\n"), path)

        sample = next_sample(previous, count, day)
        self._append_text(path, prefix + encode_sample(sample), created)
        return sample

    def read_series(self, name: str) -> list[Sample]:
        """Read the full series in append order.

        In "warn" mode malformed rows are logged and left out.
        """
        path = self.path_for(name)
        if not path.exists():
            raise NotFoundError(check_entity_name(name))
        on_error = self._skip_record if self._on_corrupt == ON_CORRUPT_WARN else None
        return decode_rows(self._read_bytes(path).split(b"\n"), path, on_error)

    def latest(self, name: str) -> Sample | None:
        """Return the last stored sample, or None without history."""
        path = self.path_for(name)
        if not path.exists():
            return None
        return self._last_sample(self._read_bytes(path).split(b"\n"), path)

    def _previous_for_append(self, lines: Sequence[bytes], path: Path) -> Sample | None:
        """Return the last sample, applying the on_corrupt policy."""
        try:
            return self._last_sample(lines, path)
        except ParseError as e:
            if self._on_corrupt == ON_CORRUPT_RAISE:
                raise
            logger.warning(
                "Malformed last record in %s (line %d: %r), "
                "appending with no prior data",
                path,
                e.line_number,
                e.line,
            )
            return None

    def _last_sample(self, lines: Sequence[bytes], path: Path) -> Sample | None:
        """Decode the last data row.

        A last row without delta takes the count of the row before it; only
        that count has to be readable.
        """
        rows = _data_rows_from_end(lines, path)
        last = next(rows, None)
        if last is None:
            return None
        number, line = last
        previous_count = None
        if line.count(",") == 1:
            previous_count = self._count_before(rows, path)
        return decode_row(line, previous_count, path, number)

    def _count_before(self, rows: Iterator[tuple[int, str]], path: Path) -> int | None:
        try:
            earlier = next(rows, None)
            if earlier is None:
                return None
            number, line = earlier
            return decode_count(line, path, number)
        except ParseError as e:
            if self._on_corrupt == ON_CORRUPT_RAISE:
                raise
            self._skip_record(e)
            return None

    @staticmethod
    def _skip_record(error: ParseError) -> None:
        logger.warning(
            "Skipping malformed record in %s (line %d: %r): %s",
            error.path,
            error.line_number,
            error.line,
            error.reason,
        )

    @staticmethod
    def _read_bytes(path: Path) -> bytes:
        """Read a series file."""
        try:
            return path.read_bytes()
        except OSError as e:
            raise HistoryIOError(f"Cannot read {path}: {e}") from e

    @staticmethod
    def _append_text(path: Path, text: str, created: bool) -> None:
        """Append text durably, rolling back on failure."""
        try:
            fd = os.open(path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
        except OSError as e:
            raise HistoryIOError(f"Cannot open {path}: {e}") from e

        start: int | None = None
        failure: OSError | None = None
        try:
            start = os.fstat(fd).st_size
            _write_all(fd, text.encode("utf-8"))
            os.fsync(fd)
        except OSError as e:
            failure = e
            if start is not None and not created:
                try:
                    os.ftruncate(fd, start)
                except OSError as rollback_error:
                    logger.error("Cannot roll back %s: %s", path, rollback_error)
        finally:
            os.close(fd)

        if failure is None:
            return
        if created:
            try:
                path.unlink()
            except OSError as cleanup_error:
                logger.error("Cannot remove %s: %s", path, cleanup_error)
        raise HistoryIOError(f"Cannot append to {path}: {failure}") from failure
