from __future__ import annotations


class StatsError(Exception):
    """Base class for all crawlstats errors."""


class AlreadyInitializedError(StatsError):
    """Raised when the process-wide statistics context is installed twice."""


class NotInitializedError(StatsError):
    """Raised when the process-wide statistics context is used before init_stats()."""


class ConfigError(StatsError, ValueError):
    """Raised for invalid reporting configuration."""


class PushError(StatsError):
    """Raised by a push sink when a report could not be delivered anywhere."""
