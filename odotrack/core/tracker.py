"""
Location Tracker
================

Ingests coordinate samples into the active session.

For every sample:
    1. require an open session
    2. validate latitude / longitude
    3. find the newest earlier sample
    4. haversine distance from it (0 for the first sample)
    5. accrue the distance into the session
    6. store the sample

Steps run in one store write transaction, so concurrent samples are
serialized and a failure leaves no partial writes behind.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..domain.errors import PartialWipeError, StoreError, ValidationError
from ..domain.models import LocationSample, SessionSummary, WipeResult, utc_now
from ..infrastructure.database import TrackingRepository
from ..infrastructure.gps import haversine_km
from .ledger import SessionLedger
from .security import LATITUDE_BOUNDS, LONGITUDE_BOUNDS, coerce_coordinate

logger = logging.getLogger(__name__)

WIPE_CONFIRMATION = "CONFIRM"


class LocationTracker:
    """Record samples, answer reader queries and wipe stored data."""

    def __init__(
        self,
        repository: TrackingRepository,
        ledger: Optional[SessionLedger] = None,
        strict_bounds: bool = False,
        atomic_wipe: bool = True,
    ) -> None:
        self._repo = repository
        self.ledger = ledger or SessionLedger(repository)
        self.strict_bounds = strict_bounds
        self.atomic_wipe = atomic_wipe

    def record_sample(self, latitude: Any, longitude: Any) -> LocationSample:
        """
        Record one coordinate sample.

        Raises:
            NoActiveSessionError: no session is open (nothing is written)
            ValidationError: missing or non-numeric coordinates
            StoreError: persistence failed (nothing is written)
        """
        with self._repo.transaction() as conn:
            session = self.ledger.get_active_session(conn)
            lat = coerce_coordinate(
                "latitude", latitude, LATITUDE_BOUNDS if self.strict_bounds else None
            )
            lon = coerce_coordinate(
                "longitude", longitude, LONGITUDE_BOUNDS if self.strict_bounds else None
            )

            previous = self._repo.get_latest_location(conn=conn)
            delta = 0.0
            if previous is not None:
                delta = haversine_km(previous.latitude, previous.longitude, lat, lon)

            sample = LocationSample(
                latitude=lat,
                longitude=lon,
                distance=delta,
                timestamp=utc_now(),
                session_id=session.id,
            )
            self.ledger.accrue_distance(session, sample.distance, conn=conn)
            stored = self._repo.insert_location(sample, conn=conn)

        logger.debug(
            "Sample %s recorded (%.6f, %.6f) +%.6f km", stored.id, lat, lon, delta
        )
        return stored

    def get_latest_location(self) -> Optional[LocationSample]:
        """Newest sample, or None when nothing has been recorded."""
        return self._repo.get_latest_location()

    def list_locations(self, session_id: Optional[int] = None) -> list[LocationSample]:
        """Stored samples in time order, optionally for one session."""
        return self._repo.list_locations(session_id=session_id)

    def get_stats(self) -> dict:
        return self._repo.get_stats()

    def get_current_session_summary(self) -> SessionSummary:
        """
        Summary of the most recently started session, open or ended.

        Raises:
            NoActiveSessionError: if no session was ever started
        """
        return self.ledger.get_latest_session().summary()

    def wipe_all(self, confirmation_token: Any) -> WipeResult:
        """
        Delete every sample and every session.

        Raises:
            ValidationError: token is not exactly "CONFIRM" (nothing deleted)
            PartialWipeError: non-atomic mode, samples gone but sessions kept
            StoreError: nothing was deleted
        """
        if confirmation_token != WIPE_CONFIRMATION:
            raise ValidationError("Confirmation string is required")

        if self.atomic_wipe:
            with self._repo.transaction() as conn:
                locations = self._repo.delete_all_locations(conn=conn)
                sessions = self._repo.delete_all_sessions(conn=conn)
        else:
            locations = self._repo.delete_all_locations()
            try:
                sessions = self._repo.delete_all_sessions()
            except StoreError as exc:
                logger.error(
                    "Partial wipe: %d locations deleted, sessions kept: %s", locations, exc
                )
                raise PartialWipeError(
                    f"Locations deleted but sessions kept: {exc}", locations_deleted=locations
                ) from exc

        logger.info("Wiped %d locations and %d sessions", locations, sessions)
        return WipeResult(locations_deleted=locations, sessions_deleted=sessions)
