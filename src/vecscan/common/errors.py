"""Shared error codes and exceptions for the scanning core."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    CONFIG_ERROR = "CONFIG_ERROR"
    IO_ERROR = "IO_ERROR"
    MALFORMED_TOKEN = "MALFORMED_TOKEN"
    LINE_TOO_LONG = "LINE_TOO_LONG"
    INVALID_KEY = "INVALID_KEY"
    STATE_ERROR = "STATE_ERROR"


class ScanError(RuntimeError):
    """Exception carrying a structured error code for callers and the CLI."""

    def __init__(self, code: ErrorCode, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.context = context or {}

    def __str__(self) -> str:  # pragma: no cover - formatting sugar
        base = super().__str__()
        return f"[{self.code.value}] {base}" if base else self.code.value


class SourceIOError(ScanError):
    """The input could not be opened or read."""

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(ErrorCode.IO_ERROR, message, context={"path": path})
        self.path = path


class MalformedTokenError(ScanError):
    """A token after the key is not a decimal literal (strict policy only)."""

    def __init__(self, *, offset: int, line_number: int, token: bytes) -> None:
        shown = token.decode("utf-8", errors="replace")
        super().__init__(
            ErrorCode.MALFORMED_TOKEN,
            f"Malformed token {shown!r} at byte offset {offset} (line {line_number})",
            context={"offset": offset, "line_number": line_number},
        )
        self.offset = offset
        self.line_number = line_number
        self.token = token


class LineTooLongError(ScanError):
    """A line does not fit into a single buffer, so it can never be resolved."""

    def __init__(self, *, offset: int, line_number: int, capacity: int) -> None:
        super().__init__(
            ErrorCode.LINE_TOO_LONG,
            f"Line {line_number} starting at byte offset {offset} exceeds the "
            f"{capacity}-byte buffer; raise buffer_size",
            context={"offset": offset, "line_number": line_number, "capacity": capacity},
        )
        self.offset = offset
        self.line_number = line_number
        self.capacity = capacity


class InvalidKeyError(ScanError):
    """A line key could not be decoded as UTF-8."""

    def __init__(self, *, offset: int, line_number: int, key: bytes) -> None:
        super().__init__(
            ErrorCode.INVALID_KEY,
            f"Key {key!r} at byte offset {offset} (line {line_number}) is not valid UTF-8",
            context={"offset": offset, "line_number": line_number},
        )
        self.offset = offset
        self.line_number = line_number
        self.key = key
