"""Command-line shell over the scanning core: sum and scan."""
from __future__ import annotations

import argparse
from itertools import islice
from pathlib import Path
from typing import Any, Dict, Optional

from vecscan.common.config import load_runtime_config
from vecscan.common.errors import ScanError
from vecscan.common.models import RuntimeConfig, ScanProgress
from vecscan.core.scanning import FloatFileReader


def render_progress(progress: ScanProgress) -> None:
    rate = f" {progress.bytes_per_second / 1_048_576:.1f} MB/s" if progress.bytes_per_second else ""
    print(
        f"[{progress.phase}] {progress.file_path} bytes={progress.bytes_read} "
        f"lines={progress.lines} values={progress.values}{rate}"
    )


def build_runtime(args: argparse.Namespace) -> RuntimeConfig:
    overrides: Dict[str, Dict[str, Any]] = {"global": {}, "profile": {}}
    if args.strict:
        overrides["global"]["error_policy"] = "strict"
    if args.drop_last_token:
        overrides["global"]["last_token"] = "drop"
    if args.buffer_size:
        overrides["profile"]["buffer_size"] = args.buffer_size
    config_path = Path(args.config) if args.config else None
    return load_runtime_config(args.profile, config_path=config_path, overrides=overrides)


def build_reader(args: argparse.Namespace) -> FloatFileReader:
    runtime = build_runtime(args)
    progress_log = Path(args.progress_log) if args.progress_log else None
    return FloatFileReader(
        runtime,
        progress_log=progress_log,
        progress_callback=render_progress if args.verbose else None,
    )


def command_sum(args: argparse.Namespace) -> None:
    reader = build_reader(args)
    total = reader.sum(Path(args.path))
    print(f"{total!r}")


def command_scan(args: argparse.Namespace) -> None:
    reader = build_reader(args)
    lines = reader.scan(Path(args.path))
    try:
        for values in islice(lines, args.limit):
            print(" ".join(repr(float(value)) for value in values))
    finally:
        lines.close()


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="Key-prefixed float file (e.g. a .vec embedding file)")
    parser.add_argument("--profile", default="default", help="Config profile (default: default)")
    parser.add_argument("--config", help="Alternative config JSON path")
    parser.add_argument("--buffer-size", type=int, help="Override the profile buffer size in bytes")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on malformed tokens instead of skipping the rest of the line",
    )
    parser.add_argument(
        "--drop-last-token",
        action="store_true",
        help="Ignore a final value that is not followed by a space",
    )
    parser.add_argument("--progress-log", help="Append JSONL progress events to this file")
    parser.add_argument("--verbose", action="store_true", help="Print progress events")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Streaming float extraction for word-vector files")
    subparsers = parser.add_subparsers(dest="command")

    total = subparsers.add_parser("sum", help="Print the single-precision sum of all values")
    _add_common_arguments(total)
    total.set_defaults(func=command_sum)

    scan = subparsers.add_parser("scan", help="Print the parsed values of each line")
    _add_common_arguments(scan)
    scan.add_argument("--limit", type=int, default=None, help="Stop after N lines")
    scan.set_defaults(func=command_scan)
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    try:
        args.func(args)
    except ScanError as exc:
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
