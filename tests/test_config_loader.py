"""Tests for runtime configuration loader."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from vecscan.common.config import load_config_document, load_runtime_config
from vecscan.common.errors import ErrorCode, ScanError


def test_load_default_profile() -> None:
    config = load_runtime_config()
    assert config.profile.buffer_size == 131072
    assert config.profile.rewind_strategy == "auto"
    assert config.global_settings.error_policy == "lenient"
    assert config.global_settings.last_token == "keep"


def test_shipped_profiles_are_valid() -> None:
    document = load_config_document()
    assert {"default", "low_memory", "streaming", "large"} <= set(document.profiles)
    assert document.profiles["streaming"].rewind_strategy == "carry"
    assert document.version == 1


def test_overrides_merge_into_selected_profile() -> None:
    config = load_runtime_config(
        "low_memory",
        overrides={"global": {"error_policy": "STRICT"}, "profile": {"buffer_size": 64}},
    )
    options = config.scan_options()
    assert options.buffer_size == 64
    assert options.error_policy == "strict"
    assert options.last_token == "keep"


def test_missing_profile_raises_scan_error(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        {"version": 1, "global": {"error_policy": "lenient"}, "profiles": {"only": _profile_payload()}},
    )
    with pytest.raises(ScanError) as exc:
        load_runtime_config("missing", config_path=config_path)
    assert exc.value.code == ErrorCode.CONFIG_ERROR


def test_invalid_error_policy_rejected(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        {"version": 1, "global": {"error_policy": "panic"}, "profiles": {"default": _profile_payload()}},
    )
    with pytest.raises(ScanError) as exc:
        load_runtime_config(config_path=config_path)
    assert "error_policy" in str(exc.value)


def test_invalid_rewind_strategy_rejected(tmp_path: Path) -> None:
    profile = {**_profile_payload(), "rewind_strategy": "teleport"}
    config_path = _write_config(
        tmp_path, {"version": 1, "global": {}, "profiles": {"default": profile}}
    )
    with pytest.raises(ScanError) as exc:
        load_runtime_config(config_path=config_path)
    assert "rewind_strategy" in str(exc.value)


@pytest.mark.parametrize("buffer_size", [0, -16, "big", True])
def test_buffer_size_must_be_positive_integer(tmp_path: Path, buffer_size) -> None:
    profile = {**_profile_payload(), "buffer_size": buffer_size}
    config_path = _write_config(
        tmp_path, {"version": 1, "global": {}, "profiles": {"default": profile}}
    )
    with pytest.raises(ScanError) as exc:
        load_runtime_config(config_path=config_path)
    assert exc.value.code == ErrorCode.CONFIG_ERROR


def test_missing_required_field_rejected(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        {"version": 1, "global": {}, "profiles": {"default": {"description": "no size"}}},
    )
    with pytest.raises(ScanError) as exc:
        load_runtime_config(config_path=config_path)
    assert "buffer_size" in str(exc.value)


def test_invalid_json_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ScanError) as exc:
        load_runtime_config(config_path=config_path)
    assert exc.value.code == ErrorCode.CONFIG_ERROR


def _write_config(tmp_path: Path, payload: dict) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def _profile_payload() -> dict:
    return {
        "description": "tmp",
        "buffer_size": 4096,
        "rewind_strategy": "auto",
        "progress_every_chunks": 8,
    }
