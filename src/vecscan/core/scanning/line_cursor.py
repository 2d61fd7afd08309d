"""Newline scanning inside a single chunk."""
from __future__ import annotations

from typing import Iterator, Tuple

NEWLINE = b"\n"


class LineCursor:
    """Yields ``(start, end)`` views of every complete line in a chunk.

    Ranges index into ``buffer`` and exclude the terminating newline. They are
    only meaningful until the buffer is refilled. Once iteration stops, the
    bytes from ``tail_start`` to ``length`` have no newline yet and must be
    re-delivered with the next chunk. An empty line comes out as an empty
    range instead of being folded into the tail.
    """

    __slots__ = ("buffer", "length", "_start", "lines")

    def __init__(self, buffer: bytearray, length: int, *, start: int = 0) -> None:
        self.buffer = buffer
        self.length = length
        self._start = start
        self.lines = 0

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        buffer = self.buffer
        end = self.length
        start = self._start
        while True:
            newline = buffer.find(NEWLINE, start, end)
            if newline < 0:
                return
            self._start = newline + 1
            self.lines += 1
            yield start, newline
            start = self._start

    @property
    def tail_start(self) -> int:
        return self._start

    @property
    def tail_length(self) -> int:
        return self.length - self._start
