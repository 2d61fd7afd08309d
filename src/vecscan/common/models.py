"""Data models shared across the CLI, scanning engine and config layers."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional

ErrorPolicy = Literal["lenient", "strict"]
LastTokenPolicy = Literal["keep", "drop"]
RewindStrategy = Literal["auto", "seek", "carry"]

DEFAULT_BUFFER_SIZE = 16_000 * 8


@dataclass(slots=True)
class ScanOptions:
    """Knobs for a single scan; built from a profile or passed directly."""

    buffer_size: int = DEFAULT_BUFFER_SIZE
    error_policy: ErrorPolicy = "lenient"
    last_token: LastTokenPolicy = "keep"
    rewind_strategy: RewindStrategy = "auto"
    progress_every_chunks: int = 64


@dataclass(slots=True)
class ScanProgress:
    """Progress payload reported while a file is being scanned."""

    file_path: Path
    bytes_read: int
    lines: int
    values: int
    phase: str
    bytes_per_second: Optional[float] = None


@dataclass(slots=True)
class ScanSummary:
    """Counters collected over a finished scan."""

    file_path: Optional[Path] = None
    bytes_read: int = 0
    chunks: int = 0
    lines: int = 0
    values: int = 0
    elapsed_seconds: float = 0.0


@dataclass(slots=True)
class GlobalSettings:
    """Global knobs that apply across profiles."""

    error_policy: str = "lenient"  # lenient | strict
    last_token: str = "keep"  # keep | drop


@dataclass(slots=True)
class ProfileSettings:
    """Named buffer/IO profile loaded from the config document."""

    description: str = ""
    buffer_size: int = DEFAULT_BUFFER_SIZE
    rewind_strategy: str = "auto"
    progress_every_chunks: int = 64


@dataclass(slots=True)
class RuntimeConfig:
    global_settings: GlobalSettings = field(default_factory=GlobalSettings)
    profile: ProfileSettings = field(default_factory=ProfileSettings)

    def scan_options(self) -> ScanOptions:
        return ScanOptions(
            buffer_size=self.profile.buffer_size,
            error_policy=self.global_settings.error_policy,  # type: ignore[arg-type]
            last_token=self.global_settings.last_token,  # type: ignore[arg-type]
            rewind_strategy=self.profile.rewind_strategy,  # type: ignore[arg-type]
            progress_every_chunks=self.profile.progress_every_chunks,
        )
