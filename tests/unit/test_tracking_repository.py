"""
Unit Tests for Tracking Repository Operations
=============================================

Tests the SQLite repository behind the session ledger and tracker.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from odotrack.domain.errors import StoreError
from odotrack.domain.models import LocationSample
from odotrack.infrastructure.database import TrackingRepository

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


class TestSessionRows:
    """Tests for session persistence."""

    def test_insert_open_session(self, repo):
        """A first open session is inserted with zero distance."""
        session = repo.insert_open_session(T0)

        assert session is not None
        assert session.id > 0
        assert session.distance == 0.0
        assert session.is_active

        stored = repo.get_session(session.id)
        assert stored.start_time == T0
        assert stored.end_time is None

    def test_second_open_session_refused(self, repo):
        """Conditional insert refuses a second open session."""
        assert repo.insert_open_session(T0) is not None
        assert repo.insert_open_session(T0 + timedelta(seconds=1)) is None
        assert repo.get_stats()["sessions_total"] == 1

    def test_unique_index_blocks_raw_second_open_row(self, repo):
        """The partial unique index holds even without the conditional insert."""
        repo.insert_open_session(T0)
        with pytest.raises(StoreError):
            with repo.transaction() as conn:
                conn.execute(
                    "INSERT INTO sessions (start_time, distance) VALUES (?, 0)",
                    (T0.isoformat(),),
                )
        assert repo.get_stats()["sessions_open"] == 1

    def test_close_session_only_once(self, repo):
        """close_session succeeds only while the session is open."""
        session = repo.insert_open_session(T0)

        assert repo.close_session(session.id, T0 + timedelta(minutes=5)) is True
        assert repo.close_session(session.id, T0 + timedelta(minutes=9)) is False
        assert repo.get_session(session.id).end_time == T0 + timedelta(minutes=5)

    def test_open_vs_latest_session(self, repo):
        """get_open_session ignores ended sessions, get_latest_session does not."""
        first = repo.insert_open_session(T0)
        repo.close_session(first.id, T0 + timedelta(minutes=1))

        assert repo.get_open_session() is None
        assert repo.get_latest_session().id == first.id

        second = repo.insert_open_session(T0 + timedelta(minutes=2))
        assert repo.get_open_session().id == second.id
        assert repo.get_latest_session().id == second.id

    def test_increment_distance_adds(self, repo):
        """increment_distance adds to the stored value."""
        session = repo.insert_open_session(T0)

        assert repo.increment_distance(session.id, 1.5)
        assert repo.increment_distance(session.id, 2.25)
        assert repo.get_session(session.id).distance == pytest.approx(3.75)

    def test_increment_distance_refused_after_close(self, repo):
        """An ended session's distance is frozen."""
        session = repo.insert_open_session(T0)
        repo.increment_distance(session.id, 1.0)
        repo.close_session(session.id, T0 + timedelta(minutes=1))

        assert repo.increment_distance(session.id, 5.0) is False
        assert repo.get_session(session.id).distance == pytest.approx(1.0)

    def test_increment_unknown_session(self, repo):
        """Unknown session ids are reported, not silently ignored."""
        assert repo.increment_distance(999, 1.0) is False


class TestLocationRows:
    """Tests for location sample persistence."""

    def test_empty_store_has_no_latest(self, repo):
        assert repo.get_latest_location() is None

    def test_insert_assigns_id(self, repo):
        """insert_location returns the sample with its store id."""
        sample = repo.insert_location(
            LocationSample(latitude=1.0, longitude=2.0, distance=0.0, timestamp=T0, session_id=7)
        )
        assert sample.id is not None

        latest = repo.get_latest_location()
        assert latest.id == sample.id
        assert latest.latitude == 1.0
        assert latest.longitude == 2.0
        assert latest.session_id == 7
        assert latest.timestamp == T0

    def test_latest_by_timestamp(self, repo):
        """Newest timestamp wins regardless of insertion order."""
        repo.insert_location(LocationSample(latitude=1.0, longitude=1.0, timestamp=T0 + timedelta(seconds=10)))
        repo.insert_location(LocationSample(latitude=2.0, longitude=2.0, timestamp=T0))

        assert repo.get_latest_location().latitude == 1.0

    def test_equal_timestamps_break_ties_by_id(self, repo):
        """Samples sharing a timestamp are ordered by insertion."""
        repo.insert_location(LocationSample(latitude=1.0, longitude=1.0, timestamp=T0))
        repo.insert_location(LocationSample(latitude=2.0, longitude=2.0, timestamp=T0))

        assert repo.get_latest_location().latitude == 2.0

    def test_list_locations_by_session(self, repo):
        """list_locations can filter by session."""
        repo.insert_location(LocationSample(latitude=1.0, longitude=1.0, timestamp=T0, session_id=1))
        repo.insert_location(LocationSample(latitude=2.0, longitude=2.0, timestamp=T0, session_id=2))

        assert [s.latitude for s in repo.list_locations()] == [1.0, 2.0]
        assert [s.latitude for s in repo.list_locations(session_id=2)] == [2.0]


class TestTransactions:
    """Tests for the write transaction boundary."""

    def test_rollback_on_error(self, repo):
        """Writes inside a failed transaction are discarded."""
        session = repo.insert_open_session(T0)

        with pytest.raises(RuntimeError):
            with repo.transaction() as conn:
                repo.increment_distance(session.id, 10.0, conn=conn)
                repo.insert_location(
                    LocationSample(latitude=0.0, longitude=0.0, timestamp=T0), conn=conn
                )
                raise RuntimeError("abort")

        assert repo.get_session(session.id).distance == 0.0
        assert repo.get_latest_location() is None

    def test_commit_on_success(self, repo):
        session = repo.insert_open_session(T0)

        with repo.transaction() as conn:
            repo.increment_distance(session.id, 2.0, conn=conn)

        assert repo.get_session(session.id).distance == pytest.approx(2.0)

    def test_delete_all(self, repo):
        """Bulk deletes report row counts."""
        repo.insert_open_session(T0)
        for i in range(3):
            repo.insert_location(LocationSample(latitude=i, longitude=i, timestamp=T0))

        assert repo.delete_all_locations() == 3
        assert repo.delete_all_sessions() == 1
        assert repo.get_stats() == {"sessions_total": 0, "sessions_open": 0, "locations_total": 0}


class TestStoreErrors:
    """Tests for store failure wrapping."""

    def test_unopenable_database_raises_store_error(self, tmp_path):
        """A directory in place of the database file surfaces as StoreError."""
        bad = tmp_path / "not_a_file.db"
        bad.mkdir()
        with pytest.raises(StoreError):
            TrackingRepository(bad)

    def test_schema_is_idempotent(self, db_path):
        """Opening the same database twice keeps existing rows."""
        first = TrackingRepository(db_path)
        first.insert_open_session(T0)

        second = TrackingRepository(db_path)
        assert second.get_stats()["sessions_total"] == 1
