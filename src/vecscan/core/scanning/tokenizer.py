"""Float token parsing straight from line bytes.

A line looks like ``<key> <v1> <v2> ... <vN>[ ]``. The key runs up to the
first space and is never parsed. Each value must be a decimal literal using
``.`` as the decimal point, followed either by a single space or by the end of
the line. Parsing never consults the process locale. Lines and keys stay in
the buffer; each numeric literal is copied once, for ``float``.
"""
from __future__ import annotations

import re
from typing import List, Optional, Tuple, Union

import numpy as np

from vecscan.common.config import validate_error_policy, validate_last_token
from vecscan.common.errors import InvalidKeyError, MalformedTokenError
from .sinks import LineValuesSink, Sink

ByteBuffer = Union[bytes, bytearray]

SPACE = 0x20
DELIMITER = b" "
FLOAT_PATTERN = re.compile(rb"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_float(buffer: ByteBuffer, pos: int, end: int) -> Optional[Tuple[np.float32, int]]:
    """Parse the longest float literal starting at ``pos``.

    Returns the single-precision value and the number of bytes consumed, or
    ``None`` when no literal starts there. The scan runs in place over the
    buffer; only the matched literal is copied out, because ``float`` needs
    its own bytes object to convert.
    """

    match = FLOAT_PATTERN.match(buffer, pos, end)
    if match is None:
        return None
    return np.float32(float(match.group())), match.end() - pos


class FloatTokenizer:
    """Feeds the values of one line into a sink."""

    def __init__(self, *, error_policy: str = "lenient", last_token: str = "keep") -> None:
        self.error_policy = validate_error_policy(error_policy)
        self.last_token = validate_last_token(last_token)
        self.strict = self.error_policy == "strict"
        self.drop_last = self.last_token == "drop"

    def feed(
        self,
        buffer: ByteBuffer,
        start: int,
        end: int,
        sink: Sink,
        *,
        base_offset: int = 0,
        line_number: int = 0,
    ) -> int:
        """Skip the key of ``buffer[start:end]`` and push its values into ``sink``.

        Returns the number of values emitted.
        """

        space = buffer.find(DELIMITER, start, end)
        key_end = end if space < 0 else space
        try:
            sink.begin_line(buffer, start, key_end)
        except UnicodeDecodeError as exc:
            raise InvalidKeyError(
                offset=base_offset + start,
                line_number=line_number,
                key=bytes(buffer[start:key_end]),
            ) from exc
        if space < 0:
            return 0
        return self._feed_values(buffer, space + 1, end, sink, base_offset, line_number)

    def parse_line(self, data: ByteBuffer, *, skip_key: bool = True, line_number: int = 1) -> List[np.float32]:
        """Parse a standalone line (no trailing newline) into a list of values."""

        sink = LineValuesSink()
        if skip_key:
            self.feed(data, 0, len(data), sink, line_number=line_number)
        else:
            sink.begin_line(data, 0, 0)
            self._feed_values(data, 0, len(data), sink, 0, line_number)
        return sink.end_line()

    def _feed_values(
        self,
        buffer: ByteBuffer,
        pos: int,
        end: int,
        sink: Sink,
        base_offset: int,
        line_number: int,
    ) -> int:
        emitted = 0
        while pos < end:
            parsed = parse_float(buffer, pos, end)
            stop = pos + parsed[1] if parsed is not None else pos
            if parsed is None or (stop < end and buffer[stop] != SPACE):
                if self.strict:
                    token_end = buffer.find(DELIMITER, pos, end)
                    raise MalformedTokenError(
                        offset=base_offset + pos,
                        line_number=line_number,
                        token=bytes(buffer[pos:end if token_end < 0 else token_end]),
                    )
                break
            if stop == end and self.drop_last:
                break
            sink.accept(parsed[0])
            emitted += 1
            pos = stop + 1
        return emitted
