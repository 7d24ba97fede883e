"""Exception hierarchy for trackerdash.

The bucketing engine never raises for an unrecognized window or
granularity (it returns a sentinel instead); these exceptions cover the
I/O collaborators around it: configuration, the stats endpoint and the
payload it returns.
"""

from __future__ import annotations

from typing import Any


class TrackerDashError(Exception):
    """Base exception for all trackerdash errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize trackerdash error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class NetworkError(TrackerDashError):
    """Network-related errors."""


class StatsFetchError(NetworkError):
    """The tracker stats endpoint could not be reached or answered badly."""


class ValidationError(TrackerDashError):
    """Data validation errors."""


class ConfigurationError(ValidationError):
    """Configuration validation errors."""


class StatsPayloadError(ValidationError):
    """The stats snapshot does not have the expected shape."""
