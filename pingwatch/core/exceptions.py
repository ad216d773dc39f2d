"""
Custom exceptions for PingWatch.

Only StorageError and ConfigurationError are meant to reach callers of the
public operations. The others are raised and recovered inside the core.
"""


class PingWatchError(Exception):
    """Base exception for PingWatch failures."""
    pass


class InsufficientDataError(PingWatchError):
    """Raised when a window holds fewer samples than a rule requires."""
    pass


class DegenerateBaselineError(PingWatchError):
    """Raised when the baseline standard deviation is zero."""
    pass


class PredictorUnavailableError(PingWatchError):
    """Raised when an external predictor is disabled, unreachable, or returns garbage."""
    pass


class StorageError(PingWatchError):
    """Raised when a sample source or repository cannot serve a request."""
    pass


class ConfigurationError(PingWatchError):
    """Raised when configuration is invalid or missing."""
    pass
