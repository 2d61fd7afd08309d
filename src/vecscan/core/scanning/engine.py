"""Scan loop shared by the blocking and asyncio read paths."""
from __future__ import annotations

import time
from pathlib import Path
from typing import (
    Any,
    AsyncIterator,
    BinaryIO,
    Callable,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

import numpy as np

from vecscan.common.errors import LineTooLongError
from vecscan.common.models import RuntimeConfig, ScanOptions, ScanProgress, ScanSummary
from vecscan.common.progress import ProgressLogger
from vecscan.core.buffers import SHARED_POOL, BufferPool
from .line_cursor import LineCursor
from .sinks import LineValuesSink, Sink, SumSink, VectorSink
from .source import ChunkSource
from .tokenizer import FloatTokenizer

T = TypeVar("T")

ScanTarget = Union[str, Path, BinaryIO]
ProgressCallback = Optional[Callable[[ScanProgress], None]]
# handler(buffer, start, end, chunk_offset, line_number) -> item or None
LineHandler = Callable[[bytearray, int, int, int, int], Any]

FILL = object()  # request for the driver to load the next chunk
PEEK = object()  # request for the byte after a full chunk


class TokenizingHandler:
    """Runs the tokenizer over a line and collects what the sink emits."""

    __slots__ = ("tokenizer", "sink", "summary")

    def __init__(self, tokenizer: FloatTokenizer, sink: Sink, summary: ScanSummary) -> None:
        self.tokenizer = tokenizer
        self.sink = sink
        self.summary = summary

    def __call__(self, buffer: bytearray, start: int, end: int, chunk_offset: int, line_number: int) -> Any:
        self.summary.values += self.tokenizer.feed(
            buffer, start, end, self.sink, base_offset=chunk_offset, line_number=line_number
        )
        return self.sink.end_line()


def scan_steps(
    source: ChunkSource,
    handler: LineHandler,
    summary: ScanSummary,
    on_chunk: Optional[Callable[[ScanSummary], None]] = None,
) -> Iterator[Any]:
    """Read, split and hand every line to ``handler``.

    Yields ``FILL`` whenever the source needs its next chunk, ``PEEK`` when a
    full chunk holds no newline, and the non-``None`` handler results
    otherwise. The generator performs no I/O itself apart from ``rewind``;
    the driver loads chunks.
    """

    buffer = source.buffer
    capacity = source.capacity
    line_number = 0
    while True:
        yield FILL
        length = source.length
        if source.fresh == 0:
            if length:
                # final line without a terminating newline
                line_number += 1
                summary.lines = line_number
                item = handler(buffer, 0, length, source.position, line_number)
                if item is not None:
                    yield item
            return

        summary.chunks += 1
        summary.bytes_read = source.bytes_read
        cursor = LineCursor(buffer, length)
        for start, end in cursor:
            line_number += 1
            item = handler(buffer, start, end, source.position, line_number)
            if item is not None:
                yield item
        summary.lines = line_number

        tail = cursor.tail_length
        if tail == capacity:
            # a line that exactly fills the buffer ends if the next byte does
            yield PEEK
            if source.peeked not in (b"", b"\n"):
                raise LineTooLongError(
                    offset=source.position + cursor.tail_start,
                    line_number=line_number + 1,
                    capacity=capacity,
                )
            line_number += 1
            summary.lines = line_number
            summary.bytes_read = source.bytes_read
            item = handler(buffer, 0, capacity, source.position, line_number)
            if item is not None:
                yield item
            if not source.peeked:
                return
            tail = 0
        source.rewind(tail)
        if on_chunk is not None:
            on_chunk(summary)


class FloatFileReader:
    """Streams float values out of key-prefixed vector files."""

    def __init__(
        self,
        runtime: Optional[RuntimeConfig] = None,
        *,
        options: Optional[ScanOptions] = None,
        pool: Optional[BufferPool] = None,
        progress_log: Optional[Path] = None,
        progress_callback: ProgressCallback = None,
    ) -> None:
        if options is None:
            options = runtime.scan_options() if runtime is not None else ScanOptions()
        self.options = options
        self.pool = pool or SHARED_POOL
        self.progress = ProgressLogger(progress_log, progress_callback)
        self.tokenizer = FloatTokenizer(error_policy=options.error_policy, last_token=options.last_token)
        self.last_summary: Optional[ScanSummary] = None

    # Reducing ---------------------------------------------------------

    def sum(self, target: ScanTarget) -> float:
        sink = SumSink()
        for _ in self._iterate(target, self._tokenizing(sink)):
            pass
        return sink.result()

    async def sum_async(self, target: ScanTarget) -> float:
        sink = SumSink()
        async for _ in self._aiterate(target, self._tokenizing(sink)):
            pass
        return sink.result()

    # Sequences --------------------------------------------------------

    def scan(self, target: ScanTarget) -> Iterator[List[np.float32]]:
        """Per-line value lists in file order (keys skipped)."""
        return self._iterate(target, self._tokenizing(LineValuesSink()))

    def scan_async(self, target: ScanTarget) -> AsyncIterator[List[np.float32]]:
        return self._aiterate(target, self._tokenizing(LineValuesSink()))

    def iter_values(self, target: ScanTarget) -> Iterator[np.float32]:
        for values in self.scan(target):
            yield from values

    def read_vectors(self, target: ScanTarget) -> Iterator[Tuple[str, np.ndarray]]:
        return self._iterate(target, self._tokenizing(VectorSink()))

    def map_lines(self, target: ScanTarget, parser: Callable[[memoryview], Optional[T]]) -> Iterator[T]:
        """Apply ``parser`` to a read-only view of every line.

        The view is only valid during the call; ``None`` results are skipped.
        """

        def handle(buffer: bytearray, start: int, end: int, chunk_offset: int, line_number: int) -> Optional[T]:
            return parser(memoryview(buffer)[start:end].toreadonly())

        return self._iterate(target, lambda summary: handle)

    # Internal helpers -------------------------------------------------

    def _tokenizing(self, sink: Sink) -> Callable[[ScanSummary], LineHandler]:
        return lambda summary: TokenizingHandler(self.tokenizer, sink, summary)

    def _open(self, target: ScanTarget) -> ChunkSource:
        lease = self.pool.rent(self.options.buffer_size)
        if hasattr(target, "readinto"):
            try:
                return ChunkSource(
                    target,  # type: ignore[arg-type]
                    lease,
                    rewind_strategy=self.options.rewind_strategy,
                    owns_stream=False,
                )
            except BaseException:
                lease.release()
                raise
        return ChunkSource.open(target, lease, rewind_strategy=self.options.rewind_strategy)  # type: ignore[arg-type]

    def _iterate(self, target: ScanTarget, make_handler: Callable[[ScanSummary], LineHandler]) -> Iterator[Any]:
        source = self._open(target)
        summary, started = self._start_summary(source), time.perf_counter()
        try:
            for request in scan_steps(source, make_handler(summary), summary, self._chunk_reporter(started)):
                if request is FILL:
                    source.next_chunk()
                elif request is PEEK:
                    source.peek_terminator()
                else:
                    yield request
            self._finish(summary, started, "done")
        finally:
            source.close()
            self.last_summary = summary

    async def _aiterate(
        self, target: ScanTarget, make_handler: Callable[[ScanSummary], LineHandler]
    ) -> AsyncIterator[Any]:
        source = self._open(target)
        summary, started = self._start_summary(source), time.perf_counter()
        try:
            for request in scan_steps(source, make_handler(summary), summary, self._chunk_reporter(started)):
                if request is FILL:
                    await source.next_chunk_async()
                elif request is PEEK:
                    await source.peek_terminator_async()
                else:
                    yield request
            self._finish(summary, started, "done")
        finally:
            source.close()
            self.last_summary = summary

    def _start_summary(self, source: ChunkSource) -> ScanSummary:
        return ScanSummary(file_path=Path(source.name))

    def _chunk_reporter(self, started: float) -> Callable[[ScanSummary], None]:
        every = max(1, self.options.progress_every_chunks)

        def report(summary: ScanSummary) -> None:
            if summary.chunks % every == 0:
                self.progress.report(summary, "scanning", time.perf_counter() - started)

        return report

    def _finish(self, summary: ScanSummary, started: float, phase: str) -> None:
        summary.elapsed_seconds = time.perf_counter() - started
        self.progress.report(summary, phase, summary.elapsed_seconds)
