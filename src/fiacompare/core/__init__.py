"""Core configuration, logging and error types."""

from .exceptions import (
    DuplicatePlotError,
    EmptyRegionError,
    FIACompareError,
    MissingColumnsError,
    MissingCredentialsError,
    RegionDownloadError,
    UnknownStateError,
)
from .settings import FIACompareSettings, get_settings
from .validation import require_columns

__all__ = [
    "DuplicatePlotError",
    "EmptyRegionError",
    "FIACompareError",
    "FIACompareSettings",
    "MissingColumnsError",
    "MissingCredentialsError",
    "RegionDownloadError",
    "UnknownStateError",
    "get_settings",
    "require_columns",
]
