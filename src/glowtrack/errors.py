"""Exception hierarchy for GlowTrack services and repositories."""

from __future__ import annotations


class GlowTrackError(Exception):
    """Base class for all application errors."""


class InvalidTimezone(GlowTrackError, ValueError):
    """Raised when an IANA timezone identifier cannot be resolved."""

    def __init__(self, timezone: str):
        super().__init__(f"Unknown timezone: {timezone!r}")
        self.timezone = timezone


class InvalidScheduleValue(GlowTrackError, ValueError):
    """Raised for an unrecognized time-of-day, frequency or status value."""

    def __init__(self, field: str, value: object):
        super().__init__(f"Invalid {field}: {value!r}")
        self.field = field
        self.value = value


class StorageUnavailable(GlowTrackError):
    """Raised when the backing store cannot be read or written."""


class NotFound(GlowTrackError):
    """Raised when a requested record does not exist for the caller."""


class StepNotCompletable(GlowTrackError):
    """Raised when a scheduled step can no longer be marked complete."""


class RoutineStateError(GlowTrackError):
    """Raised when a routine is not in a state that allows the operation."""


__all__ = [
    "GlowTrackError",
    "InvalidScheduleValue",
    "InvalidTimezone",
    "NotFound",
    "RoutineStateError",
    "StepNotCompletable",
    "StorageUnavailable",
]
