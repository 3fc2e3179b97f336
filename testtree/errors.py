"""Errors raised while turning a test event stream into a report tree.

Every error is fatal to the whole parse: callers get either a complete
tree or exactly one of these.
"""

from __future__ import annotations


class ParseError(Exception):
    """Base class for all event stream parse failures."""


class StreamError(ParseError):
    """The underlying input stream failed while being read."""


class RecordDecodeError(ParseError, ValueError):
    """A line of the event stream is not a valid record."""

    def __init__(self, line_num: int, cause: Exception) -> None:
        super().__init__(f"line {line_num}: {cause}")
        self.line_num: int = line_num
        self.cause: Exception = cause


class UnknownActionError(ParseError, ValueError):
    """A record carries an action outside run/output/pass/fail/skip."""

    def __init__(self, action: str, package: str, test: str) -> None:
        super().__init__(
            f"unknown action {action!r} for test {test!r} in package {package!r}"
        )
        self.action: str = action
        self.package: str = package
        self.test: str = test


class RootCardinalityError(ParseError, ValueError):
    """The stream does not contain exactly one run-level (root) group."""

    def __init__(self, kind: str, count: int) -> None:
        if kind == "none":
            message = "no root test found (no record group with an empty test name)"
        else:
            message = f"more than one root test ({count} record groups with an empty test name)"
        super().__init__(message)
        self.kind: str = kind
        self.count: int = count
