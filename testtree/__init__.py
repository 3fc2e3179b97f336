"""Build hierarchical test reports from newline-delimited test event streams."""

from testtree.analysis.assembler import TestNode, parse
from testtree.errors import (
    ParseError,
    RecordDecodeError,
    RootCardinalityError,
    StreamError,
    UnknownActionError,
)

__all__ = [
    "ParseError",
    "RecordDecodeError",
    "RootCardinalityError",
    "StreamError",
    "TestNode",
    "UnknownActionError",
    "parse",
]
