"""odotrack Domain Models - Pydantic models for sessions and samples."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class _WireModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Session(_WireModel):
    """A bounded interval during which samples accrue into one total."""

    id: int
    start_time: datetime = Field(default_factory=utc_now, alias="startTime")
    end_time: datetime | None = Field(default=None, alias="endTime")
    distance: float = Field(0.0, ge=0)  # km

    @property
    def is_active(self) -> bool:
        """Check if the session has not been ended yet."""
        return self.end_time is None

    def summary(self) -> SessionSummary:
        return SessionSummary(
            start_time=self.start_time,
            end_time=self.end_time,
            distance=self.distance,
            active=self.is_active,
        )


class SessionSummary(_WireModel):
    """Reader-facing view of a session."""

    start_time: datetime = Field(..., alias="startTime")
    end_time: datetime | None = Field(default=None, alias="endTime")
    distance: float = Field(0.0, ge=0)
    active: bool = False


class LocationSample(_WireModel):
    """One reported coordinate pair with its incremental distance."""

    id: int | None = None  # assigned by the store, strictly increasing
    latitude: float
    longitude: float
    distance: float = Field(0.0, ge=0)  # km from the preceding sample
    timestamp: datetime = Field(default_factory=utc_now)
    session_id: int | None = Field(default=None, alias="sessionId")


class WipeResult(_WireModel):
    """Row counts removed by a bulk wipe."""

    locations_deleted: int = Field(0, ge=0, alias="locationsDeleted")
    sessions_deleted: int = Field(0, ge=0, alias="sessionsDeleted")
