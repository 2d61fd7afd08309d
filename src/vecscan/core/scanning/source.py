"""Chunked byte source over a binary stream with tail re-delivery."""
from __future__ import annotations

import asyncio
import io
from pathlib import Path
from typing import BinaryIO, Optional, Union

from vecscan.common.errors import ErrorCode, ScanError, SourceIOError
from vecscan.common.config import validate_rewind_strategy
from vecscan.core.buffers import BufferLease

PathLike = Union[str, Path]


class ChunkSource:
    """Delivers successive chunks of a stream into one pooled buffer.

    ``rewind(n)`` makes the next chunk start with the last ``n`` bytes of the
    current one. Seekable streams move their file pointer back; other streams
    get the bytes copied to the front of the buffer. Both strategies, and both
    the blocking and the asyncio read paths, fill the buffer until it is full
    or the stream is exhausted, so they yield byte-identical chunks.
    """

    def __init__(
        self,
        stream: BinaryIO,
        lease: BufferLease,
        *,
        rewind_strategy: str = "auto",
        name: Optional[str] = None,
        owns_stream: bool = True,
    ) -> None:
        self._stream = stream
        self._lease = lease
        self._view = memoryview(lease.buffer)
        self.name = str(name or getattr(stream, "name", None) or "<stream>")
        self.owns_stream = owns_stream
        self.strategy = self._resolve_strategy(validate_rewind_strategy(rewind_strategy))
        self._length = 0
        self._fresh = 0
        self._pending = 0
        self._position = 0
        self._end_offset = 0
        self._spare = bytearray(1)
        self.peeked = b""
        self._closed = False

    @classmethod
    def open(cls, path: PathLike, lease: BufferLease, *, rewind_strategy: str = "auto") -> "ChunkSource":
        try:
            stream = open(path, "rb", buffering=0)
        except OSError as exc:
            lease.release()
            raise SourceIOError(f"Cannot open '{path}': {exc.strerror or exc}", path=str(path)) from exc
        try:
            return cls(stream, lease, rewind_strategy=rewind_strategy, name=str(path))
        except ScanError:
            stream.close()
            lease.release()
            raise

    @property
    def capacity(self) -> int:
        return self._lease.capacity

    @property
    def buffer(self) -> bytearray:
        return self._lease.buffer

    @property
    def length(self) -> int:
        """Valid bytes in the current chunk."""
        return self._length

    @property
    def fresh(self) -> int:
        """Bytes of the current chunk that were not re-delivered; 0 means end of stream."""
        return self._fresh

    @property
    def position(self) -> int:
        """Stream offset of the first byte of the current chunk."""
        return self._position

    @property
    def bytes_read(self) -> int:
        return self._end_offset

    @property
    def closed(self) -> bool:
        return self._closed

    def next_chunk(self) -> memoryview:
        pos = self._begin_fill()
        capacity = len(self._view)
        while pos < capacity:
            got = self._read_into(self._view[pos:])
            if not got:
                break
            pos += got
        return self._finish_fill(pos)

    async def next_chunk_async(self) -> memoryview:
        pos = self._begin_fill()
        capacity = len(self._view)
        while pos < capacity:
            got = await self._read_into_async(self._view[pos:])
            if not got:
                break
            pos += got
        return self._finish_fill(pos)

    def peek_terminator(self) -> bytes:
        """Read the single byte that follows a full chunk.

        The byte is stored in ``peeked`` (empty at end of stream) and counted
        as consumed, so the next chunk starts after it.
        """

        self._ensure_open()
        return self._finish_peek(self._read_into(memoryview(self._spare)))

    async def peek_terminator_async(self) -> bytes:
        self._ensure_open()
        return self._finish_peek(await self._read_into_async(memoryview(self._spare)))

    def rewind(self, count: int) -> None:
        self._ensure_open()
        if count < 0 or count > self._length:
            raise ScanError(
                ErrorCode.STATE_ERROR,
                f"Cannot rewind {count} bytes; last chunk held {self._length}",
                context={"source": self.name},
            )
        if count and self.strategy == "seek":
            try:
                self._stream.seek(-count, io.SEEK_CUR)
            except OSError as exc:
                raise SourceIOError(f"Cannot reposition '{self.name}': {exc}", path=self.name) from exc
        self._pending = count

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self.owns_stream:
                self._stream.close()
        finally:
            self._lease.release()

    def __enter__(self) -> "ChunkSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Internal helpers -------------------------------------------------

    def _resolve_strategy(self, strategy: str) -> str:
        seekable = False
        try:
            seekable = bool(self._stream.seekable())
        except (AttributeError, OSError):
            seekable = False
        if strategy == "auto":
            return "seek" if seekable else "carry"
        if strategy == "seek" and not seekable:
            raise ScanError(
                ErrorCode.CONFIG_ERROR,
                f"rewind_strategy 'seek' requires a seekable stream; '{self.name}' is not",
            )
        return strategy

    def _begin_fill(self) -> int:
        self._ensure_open()
        pending = self._pending
        self._position = self._end_offset - pending
        if pending and self.strategy == "carry":
            buffer = self._lease.buffer
            buffer[0:pending] = buffer[self._length - pending:self._length]
            return pending
        return 0

    def _read_into(self, target: memoryview) -> int:
        try:
            got = self._stream.readinto(target)
        except OSError as exc:
            raise SourceIOError(f"Read failed on '{self.name}': {exc}", path=self.name) from exc
        return got or 0

    async def _read_into_async(self, target: memoryview) -> int:
        read = asyncio.ensure_future(asyncio.to_thread(self._read_into, target))
        try:
            return await asyncio.shield(read)
        except asyncio.CancelledError:
            # the worker thread writes into the leased buffer until its read returns
            await _settle(read)
            raise

    def _finish_peek(self, got: int) -> bytes:
        self.peeked = bytes(self._spare[:got])
        self._end_offset += got
        return self.peeked

    def _finish_fill(self, pos: int) -> memoryview:
        self._fresh = pos - self._pending
        self._length = pos
        self._end_offset = self._position + pos
        self._pending = 0
        return self._view[:pos]

    def _ensure_open(self) -> None:
        if self._closed:
            raise ScanError(ErrorCode.STATE_ERROR, f"Source '{self.name}' is closed")


async def _settle(future: "asyncio.Future[int]") -> None:
    """Wait until ``future`` is done, even while the caller is being cancelled."""

    while not future.done():
        try:
            await asyncio.wait([future])
        except asyncio.CancelledError:
            continue
    if not future.cancelled():
        future.exception()
