from __future__ import annotations

import io
from pathlib import Path
from typing import Callable

import pytest

from vecscan.core.buffers import BufferPool


class PipeStream(io.RawIOBase):
    """Non-seekable stream that returns short reads, like a pipe or socket."""

    def __init__(self, data: bytes, *, max_read: int = 5) -> None:
        super().__init__()
        self._data = io.BytesIO(data)
        self._max_read = max_read

    def readable(self) -> bool:
        return True

    def readinto(self, target) -> int:
        chunk = self._data.read(min(len(target), self._max_read))
        target[: len(chunk)] = chunk
        return len(chunk)


@pytest.fixture
def pool() -> BufferPool:
    return BufferPool()


@pytest.fixture
def pipe_stream() -> Callable[..., PipeStream]:
    return PipeStream


@pytest.fixture
def write_vec(tmp_path: Path) -> Callable[[bytes], Path]:
    def _write(payload: bytes, name: str = "vectors.vec") -> Path:
        path = tmp_path / name
        path.write_bytes(payload)
        return path

    return _write
