"""Function-style entry points over :class:`FloatFileReader`."""
from __future__ import annotations

from typing import Any, AsyncIterator, Callable, Iterator, List, Optional, Tuple, TypeVar

import numpy as np

from vecscan.common.models import DEFAULT_BUFFER_SIZE, ScanOptions
from vecscan.core.buffers import BufferPool
from vecscan.core.scanning import FloatFileReader, FloatTokenizer
from vecscan.core.scanning.engine import ScanTarget

T = TypeVar("T")


def _reader(buffer_size: int, pool: Optional[BufferPool], options: dict[str, Any]) -> FloatFileReader:
    return FloatFileReader(options=ScanOptions(buffer_size=buffer_size, **options), pool=pool)


def sum_file(
    path: ScanTarget,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    *,
    pool: Optional[BufferPool] = None,
    **options: Any,
) -> float:
    """Sum every value of every line (keys skipped) in single precision.

    ``options`` are :class:`ScanOptions` fields: ``error_policy``,
    ``last_token`` and ``rewind_strategy``.
    """

    return _reader(buffer_size, pool, options).sum(path)


async def sum_file_async(
    path: ScanTarget,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    *,
    pool: Optional[BufferPool] = None,
    **options: Any,
) -> float:
    return await _reader(buffer_size, pool, options).sum_async(path)


def scan_file(
    path: ScanTarget,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    *,
    pool: Optional[BufferPool] = None,
    **options: Any,
) -> Iterator[List[np.float32]]:
    """Lazily yield the values of each line. Close the iterator to stop early."""

    return _reader(buffer_size, pool, options).scan(path)


def scan_file_async(
    path: ScanTarget,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    *,
    pool: Optional[BufferPool] = None,
    **options: Any,
) -> AsyncIterator[List[np.float32]]:
    return _reader(buffer_size, pool, options).scan_async(path)


def iter_values(
    path: ScanTarget,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    *,
    pool: Optional[BufferPool] = None,
    **options: Any,
) -> Iterator[np.float32]:
    return _reader(buffer_size, pool, options).iter_values(path)


def read_vectors(
    path: ScanTarget,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    *,
    pool: Optional[BufferPool] = None,
    **options: Any,
) -> Iterator[Tuple[str, np.ndarray]]:
    """Yield ``(word, vector)`` pairs, e.g. from a fastText ``.vec`` file."""

    return _reader(buffer_size, pool, options).read_vectors(path)


def map_lines(
    path: ScanTarget,
    parser: Callable[[memoryview], Optional[T]],
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    *,
    pool: Optional[BufferPool] = None,
    **options: Any,
) -> Iterator[T]:
    return _reader(buffer_size, pool, options).map_lines(path, parser)


def parse_line(
    data: bytes,
    *,
    skip_key: bool = True,
    error_policy: str = "lenient",
    last_token: str = "keep",
) -> List[np.float32]:
    return FloatTokenizer(error_policy=error_policy, last_token=last_token).parse_line(data, skip_key=skip_key)
