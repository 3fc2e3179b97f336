"""Record collection: first phase of building the report tree.

Reads the whole event stream and groups decoded records by their
``(package, test)`` key. Groups keep arrival order, and the mapping
itself keeps the order in which each key was first seen, which fixes
the order of children in the assembled tree.
"""

from __future__ import annotations

from typing import IO

from testtree.analysis.records import Record, RecordFormatError, decode_record
from testtree.analysis.scanner import LineScanner
from testtree.errors import RecordDecodeError

RecordGroups = dict[tuple[str, str], list[Record]]


def collect_records(stream: IO[bytes] | IO[str]) -> RecordGroups:
    """Decode every line of *stream* and group the records by key.

    Args:
        stream: Binary (or text) stream of newline-delimited JSON records.

    Returns:
        Mapping from ``(package, test)`` to that key's records, in
        stream order.

    Raises:
        RecordDecodeError: If a line does not decode; carries the 1-based
            line number and the underlying cause.
        StreamError: If reading the stream fails.
    """
    groups: RecordGroups = {}
    scanner = LineScanner(stream)

    for line in scanner:
        try:
            record = decode_record(line)
        except RecordFormatError as e:
            raise RecordDecodeError(scanner.line_num, e) from e

        group = groups.get(record.key)
        if group is None:
            group = []
            groups[record.key] = group
        group.append(record)

    return groups
