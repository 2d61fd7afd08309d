"""Pooled fixed-capacity byte buffers for chunked reads."""
from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional

from vecscan.common.errors import ErrorCode, ScanError

MIN_CAPACITY = 16
DEFAULT_MAX_RETAINED = 8


def round_capacity(size: int) -> int:
    """Round a requested size up to the pooled capacity (power of two, >= 16)."""

    if size <= 0:
        raise ScanError(ErrorCode.CONFIG_ERROR, f"buffer_size must be greater than zero, got {size}")
    capacity = MIN_CAPACITY
    while capacity < size:
        capacity <<= 1
    return capacity


@dataclass(slots=True)
class BufferLease:
    pool: "BufferPool"
    buffer: bytearray
    _released: bool = False

    @property
    def capacity(self) -> int:
        return len(self.buffer)

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self.pool._give_back(self.buffer)

    def __enter__(self) -> "BufferLease":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - trivial
        self.release()


class BufferPool:
    """Hands out reusable buffers and tracks how many are checked out."""

    def __init__(self, *, max_retained: int = DEFAULT_MAX_RETAINED) -> None:
        self.max_retained = max(0, max_retained)
        self._lock = threading.Lock()
        self._free: Dict[int, List[bytearray]] = defaultdict(list)
        self._outstanding = 0

    def rent(self, size: int) -> BufferLease:
        capacity = round_capacity(size)
        with self._lock:
            bucket = self._free.get(capacity)
            buffer: Optional[bytearray] = bucket.pop() if bucket else None
            self._outstanding += 1
        if buffer is None:
            buffer = bytearray(capacity)
        return BufferLease(self, buffer)

    @property
    def outstanding(self) -> int:
        with self._lock:
            return self._outstanding

    def retained(self, size: Optional[int] = None) -> int:
        """Number of idle buffers kept for reuse, optionally for one capacity."""

        with self._lock:
            if size is not None:
                return len(self._free.get(round_capacity(size), ()))
            return sum(len(bucket) for bucket in self._free.values())

    def clear(self) -> None:
        with self._lock:
            self._free.clear()

    # Internal helpers -------------------------------------------------

    def _give_back(self, buffer: bytearray) -> None:
        with self._lock:
            self._outstanding = max(0, self._outstanding - 1)
            bucket = self._free[len(buffer)]
            if len(bucket) < self.max_retained:
                bucket.append(buffer)


SHARED_POOL = BufferPool()
