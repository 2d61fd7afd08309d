from __future__ import annotations

from vecscan.core.scanning import LineCursor


def _lines(buffer: bytearray, cursor: LineCursor) -> list[bytes]:
    return [bytes(buffer[start:end]) for start, end in cursor]


def test_yields_complete_lines_and_reports_tail() -> None:
    buffer = bytearray(b"w1 1.0\nw2 2.0\nw3")
    cursor = LineCursor(buffer, len(buffer))
    assert _lines(buffer, cursor) == [b"w1 1.0", b"w2 2.0"]
    assert cursor.tail_start == 14
    assert cursor.tail_length == 2
    assert cursor.lines == 2


def test_buffer_ending_on_newline_has_empty_tail() -> None:
    buffer = bytearray(b"w1 1.0 2.0 3.0 \n")
    cursor = LineCursor(buffer, len(buffer))
    assert _lines(buffer, cursor) == [b"w1 1.0 2.0 3.0 "]
    assert cursor.tail_length == 0


def test_empty_lines_are_emitted_not_folded_into_tail() -> None:
    buffer = bytearray(b"\nw1 1.0\n\nw2")
    cursor = LineCursor(buffer, len(buffer))
    assert _lines(buffer, cursor) == [b"", b"w1 1.0", b""]
    assert cursor.tail_length == 2


def test_only_valid_length_is_scanned() -> None:
    buffer = bytearray(b"a\nb\nc\n")
    cursor = LineCursor(buffer, 3)
    assert _lines(buffer, cursor) == [b"a"]
    assert cursor.tail_length == 1


def test_cursor_is_single_pass() -> None:
    buffer = bytearray(b"a\nb\n")
    cursor = LineCursor(buffer, len(buffer))
    assert len(list(cursor)) == 2
    assert list(cursor) == []


def test_no_newline_means_whole_chunk_is_tail() -> None:
    buffer = bytearray(b"w1 1.0 2.0")
    cursor = LineCursor(buffer, len(buffer))
    assert _lines(buffer, cursor) == []
    assert cursor.tail_start == 0
    assert cursor.tail_length == len(buffer)
