"""Consumers of parsed values: reducing and per-line sinks."""
from __future__ import annotations

from typing import Any, List, Optional, Tuple, Union

import numpy as np

ByteBuffer = Union[bytes, bytearray]


class Sink:
    """Receives the values of each line in file order.

    ``end_line`` may return an item to hand to the caller of a sequence scan;
    ``None`` means the line produces nothing.
    """

    def begin_line(self, buffer: ByteBuffer, key_start: int, key_end: int) -> None:
        return None

    def accept(self, value: np.float32) -> None:
        raise NotImplementedError

    def end_line(self) -> Any:
        return None

    def result(self) -> Any:
        return None


class SumSink(Sink):
    """Single-precision running total."""

    def __init__(self) -> None:
        self.total = np.float32(0.0)

    def accept(self, value: np.float32) -> None:
        self.total = self.total + value

    def result(self) -> float:
        return float(self.total)


class LineValuesSink(Sink):
    def __init__(self) -> None:
        self._values: List[np.float32] = []

    def accept(self, value: np.float32) -> None:
        self._values.append(value)

    def end_line(self) -> List[np.float32]:
        values, self._values = self._values, []
        return values


class VectorSink(Sink):
    """Emits ``(key, float32 vector)`` pairs; lines without a key are skipped."""

    def __init__(self) -> None:
        self._key = ""
        self._values: List[np.float32] = []

    def begin_line(self, buffer: ByteBuffer, key_start: int, key_end: int) -> None:
        self._key = bytes(buffer[key_start:key_end]).decode("utf-8")

    def accept(self, value: np.float32) -> None:
        self._values.append(value)

    def end_line(self) -> Optional[Tuple[str, np.ndarray]]:
        key, values = self._key, self._values
        self._key, self._values = "", []
        if not key:
            return None
        return key, np.array(values, dtype=np.float32)
