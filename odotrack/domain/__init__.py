"""Domain models and error types."""

from .errors import (
    ConflictError,
    NoActiveSessionError,
    NotFoundError,
    PartialWipeError,
    StoreError,
    TrackerError,
    ValidationError,
)
from .models import LocationSample, Session, SessionSummary, WipeResult

__all__ = [
    "ConflictError",
    "LocationSample",
    "NoActiveSessionError",
    "NotFoundError",
    "PartialWipeError",
    "Session",
    "SessionSummary",
    "StoreError",
    "TrackerError",
    "ValidationError",
    "WipeResult",
]
