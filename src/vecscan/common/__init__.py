"""Errors, models, configuration and progress logging shared by all layers."""

from .config import load_config_document, load_runtime_config
from .errors import ErrorCode, InvalidKeyError, LineTooLongError, MalformedTokenError, ScanError, SourceIOError
from .models import GlobalSettings, ProfileSettings, RuntimeConfig, ScanOptions, ScanProgress, ScanSummary
from .progress import ProgressLogger

__all__ = [
    "ErrorCode",
    "GlobalSettings",
    "InvalidKeyError",
    "LineTooLongError",
    "MalformedTokenError",
    "ProfileSettings",
    "ProgressLogger",
    "RuntimeConfig",
    "ScanError",
    "ScanOptions",
    "ScanProgress",
    "ScanSummary",
    "SourceIOError",
    "load_config_document",
    "load_runtime_config",
]
