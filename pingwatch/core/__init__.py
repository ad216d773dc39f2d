"""
Core module: Configuration, logging, and exception handling.
"""

from .config import Config, config
from .exceptions import (
    ConfigurationError,
    DegenerateBaselineError,
    InsufficientDataError,
    PingWatchError,
    PredictorUnavailableError,
    StorageError,
)

__all__ = [
    "Config",
    "config",
    "PingWatchError",
    "InsufficientDataError",
    "DegenerateBaselineError",
    "PredictorUnavailableError",
    "StorageError",
    "ConfigurationError",
]
