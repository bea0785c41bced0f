"""Database infrastructure - SQLite for sessions and location samples."""

from .repository import TrackingRepository
from .schema import TRACKING_SCHEMA

__all__ = [
    "TRACKING_SCHEMA",
    "TrackingRepository",
]
