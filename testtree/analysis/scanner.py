"""Line reader for newline-delimited event streams."""

from __future__ import annotations

from typing import IO, Iterator

from testtree.errors import StreamError


class LineScanner:
    """Iterates over the non-blank lines of a stream.

    Yields the raw bytes of each line with the line terminator stripped.
    Blank lines are skipped but still counted, so ``line_num`` always
    refers to the physical line last read (1-based).

    Read failures from the underlying stream, including undecodable
    bytes in a text-mode stream, are raised as StreamError.
    """

    def __init__(self, stream: IO[bytes] | IO[str]) -> None:
        self.stream = stream
        self.line_num = 0

    def __iter__(self) -> Iterator[bytes]:
        lines = iter(self.stream)
        while True:
            try:
                line = next(lines)
            except StopIteration:
                return
            except (OSError, UnicodeDecodeError) as e:
                raise StreamError(
                    f"read failed after line {self.line_num}: {e}"
                ) from e

            self.line_num += 1
            if isinstance(line, str):
                line = line.encode("utf-8")
            line = line.rstrip(b"\r\n")
            if not line.strip():
                continue
            yield line
