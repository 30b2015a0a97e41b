"""CSV text encoding for series rows.

A series file is a header line followed by one ``date,count,delta`` row per
sample, each line newline-terminated. Dates use the YYYY/MM/DD layout.
"""

from collections.abc import Callable, Iterable
from pathlib import Path

from pullhistory.core.errors import ParseError
from pullhistory.core.models import Sample
from pullhistory.core.samples import format_day, parse_day

HEADER = "Date,Count,Delta"


def encode_sample(sample: Sample) -> str:
    """Encode a sample as a single newline-terminated row."""
    return f"{format_day(sample.day)},{sample.count},{sample.delta}\n"


def is_header(line: str) -> bool:
    """Return True if the line is a column header (with or without Delta)."""
    return line.strip().lower().startswith("date,")


def decode_text(raw: bytes, path: Path | str = "<series>", line_number: int = 0) -> str:
    """Decode one stored line as UTF-8.

    Raises:
        ParseError: If the line is not valid UTF-8.
    """
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        shown = raw.decode("utf-8", "backslashreplace").rstrip("\r\n")
        raise ParseError(path, line_number, shown, "invalid UTF-8") from None


def _split(line: str, path: Path | str, line_number: int) -> tuple[str, list[str]]:
    raw = line.rstrip("\r\n")
    fields = [f.strip() for f in raw.split(",")]
    if len(fields) not in (2, 3):
        raise ParseError(path, line_number, raw, "expected date,count[,delta]")
    return raw, fields


def _parse_count(raw: str, field: str, path: Path | str, line_number: int) -> int:
    try:
        count = int(field)
    except ValueError:
        raise ParseError(path, line_number, raw, "invalid count") from None
    if count < 0:
        raise ParseError(path, line_number, raw, "negative count")
    return count


def decode_count(line: str, path: Path | str = "<series>", line_number: int = 0) -> int:
    """Decode only the count column of a row.

    Raises:
        ParseError: If the row has the wrong number of fields or an invalid
            count. Date and delta are not checked.
    """
    raw, fields = _split(line, path, line_number)
    return _parse_count(raw, fields[1], path, line_number)


def decode_row(
    line: str,
    previous_count: int | None = None,
    path: Path | str = "<series>",
    line_number: int = 0,
) -> Sample:
    """Decode one ``date,count[,delta]`` row.

    Rows without a delta column get one computed against `previous_count`
    (0 when there is none).

    Raises:
        ParseError: If the row has the wrong number of fields or a field
            cannot be parsed.
    """
    raw, fields = _split(line, path, line_number)
    try:
        day = parse_day(fields[0])
    except ValueError:
        raise ParseError(path, line_number, raw, "invalid date") from None
    count = _parse_count(raw, fields[1], path, line_number)
    if len(fields) == 3:
        try:
            delta = int(fields[2])
        except ValueError:
            raise ParseError(path, line_number, raw, "invalid delta") from None
    else:
        delta = count - previous_count if previous_count is not None else 0
    return Sample(day=day, count=count, delta=delta)


def decode_rows(
    lines: Iterable[bytes],
    path: Path | str = "<series>",
    on_error: Callable[[ParseError], None] | None = None,
) -> list[Sample]:
    """Decode every data row of a series, skipping the header and blank lines.

    Args:
        lines: Raw stored lines, without or with their line endings.
        path: Series location, used in error messages.
        on_error: Called with the ParseError of each malformed row, which is
            then left out. Without it the first malformed row raises.

    Raises:
        ParseError: On the first malformed row when `on_error` is None.
    """
    samples: list[Sample] = []
    for line_number, raw in enumerate(lines, start=1):
        if not raw.strip():
            continue
        try:
            line = decode_text(raw, path, line_number)
            if is_header(line):
                continue
            previous = samples[-1].count if samples else None
            samples.append(decode_row(line, previous, path, line_number))
        except ParseError as e:
            if on_error is None:
                raise
            on_error(e)
    return samples
