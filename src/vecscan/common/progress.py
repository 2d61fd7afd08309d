"""Scan progress reporting: callbacks plus an optional JSONL trail."""
from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Callable, Optional

from .models import ScanProgress, ScanSummary

MEBIBYTE = 1_048_576


class ProgressLogger:
    """Turns scan counters into ``ScanProgress`` events.

    Each event goes to ``callback`` when one is set and is appended to
    ``path`` as one JSON object per line when a path is set.
    """

    def __init__(
        self,
        path: Optional[Path],
        callback: Optional[Callable[[ScanProgress], None]] = None,
    ) -> None:
        self.path = path
        self.callback = callback
        if path:
            path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def active(self) -> bool:
        return bool(self.path) or self.callback is not None

    def report(self, summary: ScanSummary, phase: str, elapsed: float) -> Optional[ScanProgress]:
        """Build the event for ``summary`` and deliver it; ``None`` when nobody listens."""

        if not self.active:
            return None
        progress = ScanProgress(
            file_path=summary.file_path or Path("<stream>"),
            bytes_read=summary.bytes_read,
            lines=summary.lines,
            values=summary.values,
            phase=phase,
            bytes_per_second=summary.bytes_read / elapsed if elapsed > 0 else None,
        )
        self.emit(progress)
        if self.callback is not None:
            self.callback(progress)
        return progress

    def emit(self, progress: ScanProgress) -> None:
        if not self.path:
            return
        rate = progress.bytes_per_second
        record = {
            "timestamp": round(time.time(), 3),
            "file": str(progress.file_path),
            "phase": progress.phase,
            "bytes_read": progress.bytes_read,
            "lines": progress.lines,
            "values": progress.values,
            "mib_per_second": round(rate / MEBIBYTE, 3) if rate else None,
        }
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record))
            handle.write("\n")
