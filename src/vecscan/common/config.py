"""Helpers for loading runtime configuration profiles."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ErrorCode, ScanError
from .models import GlobalSettings, ProfileSettings, RuntimeConfig

DEFAULT_CONFIG_PATH = Path(__file__).with_name("defaults.json")
DEFAULT_PROFILE = "default"
ALLOWED_ERROR_POLICIES = {"lenient", "strict"}
ALLOWED_LAST_TOKEN_POLICIES = {"keep", "drop"}
ALLOWED_REWIND_STRATEGIES = {"auto", "seek", "carry"}


@dataclass(slots=True)
class ConfigDocument:
    source: Path
    version: int
    global_settings: GlobalSettings
    profiles: Dict[str, ProfileSettings]


def load_runtime_config(
    profile: str = DEFAULT_PROFILE,
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> RuntimeConfig:
    """Load configuration JSON, validate it, and resolve a specific profile."""

    document = load_config_document(
        profile_name=profile,
        config_path=config_path,
        overrides=overrides,
    )
    return RuntimeConfig(global_settings=document.global_settings, profile=document.profiles[profile])


def load_config_document(
    *,
    profile_name: Optional[str] = None,
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> ConfigDocument:
    cfg_path = config_path or DEFAULT_CONFIG_PATH
    raw = _read_config_json(cfg_path)

    version = _require_positive_int(raw.get("version"), "version", cfg_path)
    global_section = raw.get("global")
    if not isinstance(global_section, Mapping):
        raise ScanError(ErrorCode.CONFIG_ERROR, f"'global' section missing in {cfg_path}")

    overrides = overrides or {}
    global_data = {**global_section, **(overrides.get("global") or {})}
    global_settings = _build_global_settings(global_data, cfg_path)

    profiles_section = raw.get("profiles")
    if not isinstance(profiles_section, Mapping) or not profiles_section:
        raise ScanError(ErrorCode.CONFIG_ERROR, f"'profiles' section missing in {cfg_path}")

    profile_overrides = overrides.get("profile") or {}
    profiles: Dict[str, ProfileSettings] = {}
    for name, profile_data in profiles_section.items():
        if not isinstance(profile_data, Mapping):
            raise ScanError(
                ErrorCode.CONFIG_ERROR,
                f"Profile '{name}' must be an object in {cfg_path}",
            )
        merged = dict(profile_data)
        if profile_name and name == profile_name and profile_overrides:
            merged = {**merged, **profile_overrides}
        profiles[name] = _build_profile_settings(name, merged, cfg_path)

    if profile_name and profile_name not in profiles:
        raise ScanError(
            ErrorCode.CONFIG_ERROR,
            f"Profile '{profile_name}' not found in {cfg_path}",
        )

    return ConfigDocument(
        source=cfg_path,
        version=version,
        global_settings=global_settings,
        profiles=profiles,
    )


def validate_error_policy(value: Any, field: str = "error_policy", source: Optional[Path] = None) -> str:
    return _require_choice(value, field, source, ALLOWED_ERROR_POLICIES)


def validate_last_token(value: Any, field: str = "last_token", source: Optional[Path] = None) -> str:
    return _require_choice(value, field, source, ALLOWED_LAST_TOKEN_POLICIES)


def validate_rewind_strategy(value: Any, field: str = "rewind_strategy", source: Optional[Path] = None) -> str:
    return _require_choice(value, field, source, ALLOWED_REWIND_STRATEGIES)


# ---------------------------------------------------------------------------
# Internal helpers


def _read_config_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError as exc:  # pragma: no cover - depends on filesystem
        raise ScanError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' not found") from exc
    except json.JSONDecodeError as exc:
        raise ScanError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ScanError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' must contain an object")
    return payload


def _build_global_settings(data: Mapping[str, Any], source: Path) -> GlobalSettings:
    defaults = GlobalSettings()
    return GlobalSettings(
        error_policy=validate_error_policy(
            data.get("error_policy", defaults.error_policy), "global.error_policy", source
        ),
        last_token=validate_last_token(
            data.get("last_token", defaults.last_token), "global.last_token", source
        ),
    )


def _build_profile_settings(name: str, data: Mapping[str, Any], source: Path) -> ProfileSettings:
    prefix = f"profiles.{name}"
    required_fields = ("description", "buffer_size")
    missing = [field for field in required_fields if field not in data]
    if missing:
        raise ScanError(
            ErrorCode.CONFIG_ERROR,
            f"Profile '{name}' missing fields {missing} in {source}",
        )

    defaults = ProfileSettings()
    return ProfileSettings(
        description=_require_string(data.get("description"), f"{prefix}.description", source),
        buffer_size=_require_positive_int(data.get("buffer_size"), f"{prefix}.buffer_size", source),
        rewind_strategy=validate_rewind_strategy(
            data.get("rewind_strategy", defaults.rewind_strategy), f"{prefix}.rewind_strategy", source
        ),
        progress_every_chunks=_require_positive_int(
            data.get("progress_every_chunks", defaults.progress_every_chunks),
            f"{prefix}.progress_every_chunks",
            source,
        ),
    )


def _require_choice(value: Any, field: str, source: Optional[Path], allowed: set[str]) -> str:
    text = _require_string(value, field, source).lower()
    if text not in allowed:
        where = f" in {source}" if source else ""
        raise ScanError(
            ErrorCode.CONFIG_ERROR,
            f"Unsupported {field} '{value}'{where}. Allowed: {', '.join(sorted(allowed))}",
        )
    return text


def _require_string(value: Any, field: str, source: Optional[Path]) -> str:
    where = f" in {source}" if source else ""
    if not isinstance(value, str):
        raise ScanError(ErrorCode.CONFIG_ERROR, f"{field} must be a string{where}")
    text = value.strip()
    if not text:
        raise ScanError(ErrorCode.CONFIG_ERROR, f"{field} must be non-empty{where}")
    return text


def _require_positive_int(value: Any, field: str, source: Path) -> int:
    if isinstance(value, bool):
        raise ScanError(ErrorCode.CONFIG_ERROR, f"{field} must be an integer in {source}")
    try:
        num = int(value)
    except (TypeError, ValueError) as exc:
        raise ScanError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be an integer in {source}",
        ) from exc
    if num <= 0:
        raise ScanError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be greater than zero in {source}",
        )
    return num
