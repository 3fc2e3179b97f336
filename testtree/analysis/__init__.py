"""Event stream analysis: record decoding, collection, and tree assembly."""

from testtree.analysis.assembler import (
    TestBuilder,
    TestNode,
    assemble,
    assemble_tests,
    parse,
)
from testtree.analysis.collector import RecordGroups, collect_records
from testtree.analysis.records import (
    KNOWN_ACTIONS,
    TERMINAL_ACTIONS,
    Record,
    RecordFormatError,
    decode_record,
)
from testtree.analysis.scanner import LineScanner

__all__ = [
    "KNOWN_ACTIONS",
    "LineScanner",
    "Record",
    "RecordFormatError",
    "RecordGroups",
    "TERMINAL_ACTIONS",
    "TestBuilder",
    "TestNode",
    "assemble",
    "assemble_tests",
    "collect_records",
    "decode_record",
    "parse",
]
