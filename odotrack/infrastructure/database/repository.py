"""Tracking data access repository."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Iterator, Optional

from ...domain.errors import StoreError
from ...domain.models import LocationSample, Session
from .schema import TRACKING_SCHEMA

logger = logging.getLogger(__name__)


def _iso(value: datetime) -> str:
    # Fixed width so text ordering matches time ordering
    return value.astimezone(UTC).isoformat(timespec="microseconds")


class TrackingRepository:
    """
    Repository for session and location persistence.

    Every call opens its own SQLite connection, so one repository can be
    shared by request threads. Methods take an optional ``conn`` to join a
    transaction opened with :meth:`transaction`.
    """

    def __init__(self, db_path: str | Path, busy_timeout: float = 30.0) -> None:
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(TRACKING_SCHEMA)
        logger.info("Tracking database initialized: %s", self.db_path)

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get autocommit database connection with row factory."""
        try:
            conn = sqlite3.connect(
                str(self.db_path), timeout=self.busy_timeout, isolation_level=None
            )
        except sqlite3.Error as exc:
            raise StoreError(f"cannot open store {self.db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as exc:
            logger.error("Store operation failed: %s", exc)
            raise StoreError(f"store operation failed: {exc}") from exc
        finally:
            conn.close()

    @contextmanager
    def _use(self, conn: Optional[sqlite3.Connection]) -> Iterator[sqlite3.Connection]:
        if conn is not None:
            yield conn
            return
        with self._get_connection() as own:
            yield own

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Open a write transaction.

        BEGIN IMMEDIATE takes the database write lock up front, so
        concurrent transactions run one after another. Any exception rolls
        back every write made through the yielded connection.
        """
        with self._get_connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    # =========================================================================
    # Session Operations
    # =========================================================================

    def insert_open_session(
        self, start_time: datetime, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Session]:
        """
        Insert a new open session unless one is already open.

        Returns:
            The new session, or None if an open session exists
        """
        with self._use(conn) as c:
            try:
                cursor = c.execute(
                    """
                    INSERT INTO sessions (start_time, distance)
                    SELECT ?, 0
                    WHERE NOT EXISTS (SELECT 1 FROM sessions WHERE end_time IS NULL)
                    """,
                    (_iso(start_time),),
                )
            except sqlite3.IntegrityError:
                return None
            if cursor.rowcount != 1:
                return None
            return Session(id=cursor.lastrowid, start_time=start_time, distance=0.0)

    def get_session(
        self, session_id: int, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Session]:
        """Get session by ID."""
        with self._use(conn) as c:
            row = c.execute(
                "SELECT * FROM sessions WHERE id = ?", (session_id,)
            ).fetchone()
            return Session.model_validate(dict(row)) if row else None

    def get_open_session(
        self, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Session]:
        """Get the most recently started session that has not ended."""
        with self._use(conn) as c:
            row = c.execute(
                """
                SELECT * FROM sessions
                WHERE end_time IS NULL
                ORDER BY start_time DESC, id DESC
                LIMIT 1
                """
            ).fetchone()
            return Session.model_validate(dict(row)) if row else None

    def get_latest_session(
        self, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Session]:
        """Get the most recently started session, open or closed."""
        with self._use(conn) as c:
            row = c.execute(
                "SELECT * FROM sessions ORDER BY start_time DESC, id DESC LIMIT 1"
            ).fetchone()
            return Session.model_validate(dict(row)) if row else None

    def close_session(
        self,
        session_id: int,
        end_time: datetime,
        conn: Optional[sqlite3.Connection] = None,
    ) -> bool:
        """
        Set end_time on an open session.

        Returns:
            False if the session does not exist or was already closed
        """
        with self._use(conn) as c:
            cursor = c.execute(
                "UPDATE sessions SET end_time = ? WHERE id = ? AND end_time IS NULL",
                (_iso(end_time), session_id),
            )
            return cursor.rowcount == 1

    def increment_distance(
        self,
        session_id: int,
        delta_km: float,
        conn: Optional[sqlite3.Connection] = None,
    ) -> bool:
        """
        Atomically add delta_km to an open session's distance.

        A single UPDATE, so concurrent increments never overwrite each
        other.

        Returns:
            False if the session does not exist or was already closed
        """
        with self._use(conn) as c:
            cursor = c.execute(
                """
                UPDATE sessions SET distance = distance + ?
                WHERE id = ? AND end_time IS NULL
                """,
                (delta_km, session_id),
            )
            return cursor.rowcount == 1

    # =========================================================================
    # Location Operations
    # =========================================================================

    def get_latest_location(
        self, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[LocationSample]:
        """Get the newest sample by timestamp, id breaking ties."""
        with self._use(conn) as c:
            row = c.execute(
                "SELECT * FROM locations ORDER BY timestamp DESC, id DESC LIMIT 1"
            ).fetchone()
            return LocationSample.model_validate(dict(row)) if row else None

    def insert_location(
        self, sample: LocationSample, conn: Optional[sqlite3.Connection] = None
    ) -> LocationSample:
        """Persist a sample and return it with its store id."""
        with self._use(conn) as c:
            cursor = c.execute(
                """
                INSERT INTO locations (latitude, longitude, distance, timestamp, session_id)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    sample.latitude,
                    sample.longitude,
                    sample.distance,
                    _iso(sample.timestamp),
                    sample.session_id,
                ),
            )
            return sample.model_copy(update={"id": cursor.lastrowid})

    def list_locations(
        self, session_id: Optional[int] = None, conn: Optional[sqlite3.Connection] = None
    ) -> list[LocationSample]:
        """List samples in insertion order, optionally for one session."""
        with self._use(conn) as c:
            if session_id is None:
                rows = c.execute("SELECT * FROM locations ORDER BY timestamp, id").fetchall()
            else:
                rows = c.execute(
                    "SELECT * FROM locations WHERE session_id = ? ORDER BY timestamp, id",
                    (session_id,),
                ).fetchall()
            return [LocationSample.model_validate(dict(row)) for row in rows]

    # =========================================================================
    # Maintenance
    # =========================================================================

    def delete_all_locations(self, conn: Optional[sqlite3.Connection] = None) -> int:
        """Delete every sample. Returns rows deleted."""
        with self._use(conn) as c:
            return c.execute("DELETE FROM locations").rowcount

    def delete_all_sessions(self, conn: Optional[sqlite3.Connection] = None) -> int:
        """Delete every session. Returns rows deleted."""
        with self._use(conn) as c:
            return c.execute("DELETE FROM sessions").rowcount

    def get_stats(self) -> dict:
        """Get overall statistics."""
        with self._get_connection() as conn:
            return {
                "sessions_total": conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0],
                "sessions_open": conn.execute(
                    "SELECT COUNT(*) FROM sessions WHERE end_time IS NULL"
                ).fetchone()[0],
                "locations_total": conn.execute("SELECT COUNT(*) FROM locations").fetchone()[0],
            }
