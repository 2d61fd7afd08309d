"""Streaming float extraction from word-vector style text files."""

from .api import (
    iter_values,
    map_lines,
    parse_line,
    read_vectors,
    scan_file,
    scan_file_async,
    sum_file,
    sum_file_async,
)
from .common.errors import ErrorCode, InvalidKeyError, LineTooLongError, MalformedTokenError, ScanError, SourceIOError
from .core.buffers import SHARED_POOL, BufferPool
from .core.scanning import FloatFileReader

__version__ = "0.1.0"

__all__ = [
    "SHARED_POOL",
    "BufferPool",
    "ErrorCode",
    "FloatFileReader",
    "InvalidKeyError",
    "LineTooLongError",
    "MalformedTokenError",
    "ScanError",
    "SourceIOError",
    "iter_values",
    "map_lines",
    "parse_line",
    "read_vectors",
    "scan_file",
    "scan_file_async",
    "sum_file",
    "sum_file_async",
]
