"""Test event records and the line decoder.

Each line of the event stream is a JSON object in the ``go test -json``
shape::

    {"Time": "2024-05-01T10:00:00.123456789Z", "Action": "output",
     "Package": "example.com/pkg", "Test": "TestA", "Output": "ok\\n"}

A missing or empty ``Test`` marks a run-level event that belongs to the
root of the report tree.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

# Recognized actions
RUN = "run"
OUTPUT = "output"
TERMINAL_ACTIONS = ("fail", "pass", "skip")
KNOWN_ACTIONS = frozenset({RUN, OUTPUT, *TERMINAL_ACTIONS})

# RFC3339 with an optional fraction of any length and a Z or +hh:mm offset
_TIMESTAMP_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>[Zz]|[+-]\d{2}:\d{2})?$"
)


class RecordFormatError(ValueError):
    """Raised when a line does not decode into a Record."""


@dataclass(frozen=True)
class Record:
    """A single decoded test event."""

    test: str = ""
    package: str = ""
    time: datetime | None = None
    action: str = ""
    output: str = ""
    elapsed: float = 0.0  # milliseconds, meaningful for terminal actions

    @property
    def key(self) -> tuple[str, str]:
        """Grouping key: (package, test)."""
        return (self.package, self.test)


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC3339 timestamp into an aware datetime.

    Fractions finer than a microsecond are truncated. Timestamps without
    an offset are taken as UTC.

    Raises:
        RecordFormatError: If the value is not an RFC3339 timestamp.
    """
    match = _TIMESTAMP_RE.match(value.strip())
    if match is None:
        raise RecordFormatError(f"invalid timestamp: {value!r}")

    text = match.group("base").replace("t", "T").replace(" ", "T")
    frac = match.group("frac")
    if frac:
        text += "." + frac[:6].ljust(6, "0")
    tz = match.group("tz")
    if tz and tz not in ("Z", "z"):
        text += tz

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise RecordFormatError(f"invalid timestamp: {value!r}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _string_field(entry: dict, name: str) -> str:
    value = entry.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise RecordFormatError(
            f"field {name!r} must be a string, got {type(value).__name__}"
        )
    return value


def _elapsed_millis(value: int | float) -> float:
    """Validate an Elapsed value as a representable millisecond duration."""
    try:
        millis = float(value)
        if not math.isfinite(millis):
            raise RecordFormatError(f"field 'Elapsed' must be finite, got {value!r}")
        timedelta(milliseconds=int(millis))
    except OverflowError as e:
        raise RecordFormatError(f"field 'Elapsed' out of range: {value!r}") from e
    return millis


def decode_record(data: bytes | str) -> Record:
    """Decode one line of the event stream into a Record.

    Args:
        data: Raw line contents, without the trailing newline.

    Returns:
        The decoded Record. Unrecognized actions are kept as-is; they are
        rejected later, when the tree is assembled.

    Raises:
        RecordFormatError: If the line is not a JSON object of the
            expected shape.
    """
    try:
        entry = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RecordFormatError(f"invalid JSON: {e}") from e

    if not isinstance(entry, dict):
        raise RecordFormatError(
            f"record must be a JSON object, got {type(entry).__name__}"
        )

    elapsed = entry.get("Elapsed")
    if elapsed is None:
        elapsed = 0.0
    elif isinstance(elapsed, bool) or not isinstance(elapsed, (int, float)):
        raise RecordFormatError(
            f"field 'Elapsed' must be a number, got {type(elapsed).__name__}"
        )
    else:
        elapsed = _elapsed_millis(elapsed)

    time_value = entry.get("Time")
    if time_value is None:
        timestamp = None
    elif isinstance(time_value, str):
        timestamp = parse_timestamp(time_value)
    else:
        raise RecordFormatError(
            f"field 'Time' must be a string, got {type(time_value).__name__}"
        )

    return Record(
        test=_string_field(entry, "Test"),
        package=_string_field(entry, "Package"),
        time=timestamp,
        action=_string_field(entry, "Action"),
        output=_string_field(entry, "Output"),
        elapsed=float(elapsed),
    )
