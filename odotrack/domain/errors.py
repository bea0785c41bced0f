"""Central error types raised by the tracking core."""

from __future__ import annotations


class TrackerError(RuntimeError):
    """Base error for session and location tracking failures."""


class ValidationError(TrackerError):
    """Raised when request input is missing or malformed."""


class ConflictError(TrackerError):
    """Raised when an operation would break the single-open-session rule."""


class NotFoundError(TrackerError):
    """Raised when required prior state does not exist."""


class NoActiveSessionError(NotFoundError):
    """Raised when an operation needs a session and none is available."""

    def __init__(self, message: str = "No active session found") -> None:
        super().__init__(message)


class StoreError(TrackerError):
    """Raised when the durable store fails."""


class PartialWipeError(StoreError):
    """Raised when a non-atomic wipe removed locations but not sessions."""

    def __init__(self, message: str, locations_deleted: int) -> None:
        super().__init__(message)
        self.locations_deleted = locations_deleted


__all__ = [
    "ConflictError",
    "NoActiveSessionError",
    "NotFoundError",
    "PartialWipeError",
    "StoreError",
    "TrackerError",
    "ValidationError",
]
