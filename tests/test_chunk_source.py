from __future__ import annotations

import io

import pytest

from vecscan.common.errors import ErrorCode, ScanError, SourceIOError
from vecscan.core.scanning import ChunkSource

ALPHABET = b"abcdefghijklmnopqrstuvwxyz"


@pytest.mark.parametrize("strategy", ["seek", "carry"])
def test_rewind_redelivers_tail_as_prefix(pool, strategy: str) -> None:
    source = ChunkSource(io.BytesIO(ALPHABET), pool.rent(16), rewind_strategy=strategy)
    with source:
        first = source.next_chunk()
        assert first.tobytes() == ALPHABET[:16]
        assert source.fresh == 16
        assert source.position == 0

        source.rewind(4)
        second = source.next_chunk()
        assert second.tobytes() == ALPHABET[12:]
        assert source.fresh == 10
        assert source.position == 12

        source.rewind(0)
        assert source.next_chunk().tobytes() == b""
        assert source.fresh == 0
    assert pool.outstanding == 0


def test_non_seekable_stream_carries_tail(pool, pipe_stream) -> None:
    source = ChunkSource(pipe_stream(ALPHABET), pool.rent(16))
    assert source.strategy == "carry"
    chunks = [source.next_chunk().tobytes()]
    source.rewind(3)
    chunks.append(source.next_chunk().tobytes())
    source.close()
    assert chunks == [ALPHABET[:16], ALPHABET[13:]]


def test_peek_terminator_consumes_one_byte(pool, pipe_stream) -> None:
    with ChunkSource(pipe_stream(ALPHABET[:17]), pool.rent(16)) as source:
        source.next_chunk()
        assert source.peek_terminator() == b"q"
        assert source.peeked == b"q"
        assert source.bytes_read == 17
        source.next_chunk()
        assert source.position == 17
        assert source.fresh == 0
        assert source.peek_terminator() == b""
        assert source.bytes_read == 17


def test_auto_strategy_seeks_on_files(pool, write_vec) -> None:
    path = write_vec(ALPHABET)
    with ChunkSource.open(path, pool.rent(16)) as source:
        assert source.strategy == "seek"
        source.next_chunk()
        source.rewind(6)
        assert source.next_chunk().tobytes() == ALPHABET[10:]
        assert source.bytes_read == len(ALPHABET)


def test_seek_strategy_requires_seekable_stream(pool, pipe_stream) -> None:
    lease = pool.rent(16)
    with pytest.raises(ScanError) as exc:
        ChunkSource(pipe_stream(ALPHABET), lease, rewind_strategy="seek")
    assert exc.value.code == ErrorCode.CONFIG_ERROR
    lease.release()


def test_open_missing_file_raises_io_error(pool, tmp_path) -> None:
    with pytest.raises(SourceIOError) as exc:
        ChunkSource.open(tmp_path / "missing.vec", pool.rent(16))
    assert exc.value.code == ErrorCode.IO_ERROR
    assert pool.outstanding == 0


def test_rewind_cannot_exceed_last_chunk(pool) -> None:
    with ChunkSource(io.BytesIO(b"abc"), pool.rent(16)) as source:
        source.next_chunk()
        with pytest.raises(ScanError) as exc:
            source.rewind(4)
    assert exc.value.code == ErrorCode.STATE_ERROR


def test_closed_source_rejects_reads_and_closes_owned_stream(pool) -> None:
    stream = io.BytesIO(ALPHABET)
    source = ChunkSource(stream, pool.rent(16))
    source.close()
    assert stream.closed
    with pytest.raises(ScanError) as exc:
        source.next_chunk()
    assert exc.value.code == ErrorCode.STATE_ERROR


def test_borrowed_stream_stays_open(pool) -> None:
    stream = io.BytesIO(ALPHABET)
    ChunkSource(stream, pool.rent(16), owns_stream=False).close()
    assert not stream.closed
    assert pool.outstanding == 0


@pytest.mark.asyncio
async def test_async_chunks_match_blocking_chunks(pool, pipe_stream) -> None:
    blocking = ChunkSource(pipe_stream(ALPHABET), pool.rent(16))
    suspending = ChunkSource(pipe_stream(ALPHABET), pool.rent(16))
    try:
        assert blocking.next_chunk().tobytes() == (await suspending.next_chunk_async()).tobytes()
        blocking.rewind(5)
        suspending.rewind(5)
        assert blocking.next_chunk().tobytes() == (await suspending.next_chunk_async()).tobytes()
    finally:
        blocking.close()
        suspending.close()
    assert pool.outstanding == 0
