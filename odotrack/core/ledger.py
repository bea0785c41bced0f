"""
Session Ledger
==============

Owns the single "current session" slot and its running distance total.

Rules:
- at most one session is open (end_time unset) at any time
- a session's distance only grows while it is open
- once ended, a session is never modified again
"""

from __future__ import annotations

import logging
import math
import sqlite3
from typing import Optional

from ..domain.errors import ConflictError, NoActiveSessionError, ValidationError
from ..domain.models import Session, utc_now
from ..infrastructure.database import TrackingRepository

logger = logging.getLogger(__name__)


class SessionLedger:
    """Start, end and accrue distance into tracking sessions."""

    def __init__(self, repository: TrackingRepository) -> None:
        self._repo = repository

    def start_session(self) -> Session:
        """
        Open a new session with zero distance.

        Raises:
            ConflictError: if a session is already open
        """
        with self._repo.transaction() as conn:
            session = self._repo.insert_open_session(utc_now(), conn=conn)
        if session is None:
            raise ConflictError("An active session already exists")
        logger.info("Session %d started", session.id)
        return session

    def get_active_session(self, conn: Optional[sqlite3.Connection] = None) -> Session:
        """
        Return the open session.

        Raises:
            NoActiveSessionError: if no session is open
        """
        session = self._repo.get_open_session(conn=conn)
        if session is None:
            raise NoActiveSessionError()
        return session

    def get_latest_session(self, conn: Optional[sqlite3.Connection] = None) -> Session:
        """
        Return the most recently started session, open or ended.

        Raises:
            NoActiveSessionError: if the store holds no session at all
        """
        session = self._repo.get_latest_session(conn=conn)
        if session is None:
            raise NoActiveSessionError()
        return session

    def end_session(self) -> Session:
        """
        End the open session. A second call fails instead of moving end_time.

        Raises:
            NoActiveSessionError: if no session is open
        """
        with self._repo.transaction() as conn:
            session = self.get_active_session(conn)
            end_time = utc_now()
            if not self._repo.close_session(session.id, end_time, conn=conn):
                raise NoActiveSessionError()
            ended = self._repo.get_session(session.id, conn=conn)
        logger.info("Session %d ended (%.3f km)", session.id, ended.distance)
        return ended

    def accrue_distance(
        self,
        session: Session,
        delta_km: float,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        """
        Add delta_km to the distance of ``session``.

        The increment targets the given session by id and happens in the
        store, never as read-add-write here.

        Raises:
            ValidationError: for a negative or non-finite delta
            NoActiveSessionError: if the session has ended meanwhile
        """
        if not math.isfinite(delta_km) or delta_km < 0:
            raise ValidationError(f"distance increment must be a finite value >= 0, got {delta_km}")
        if not self._repo.increment_distance(session.id, delta_km, conn=conn):
            raise NoActiveSessionError(f"Session {session.id} is no longer active")
        logger.debug("Session %d accrued %.6f km", session.id, delta_km)
