"""Global pytest fixtures shared by the unit, integration and web tests."""
from __future__ import annotations

import pytest

from odotrack.core import LocationTracker, SessionLedger
from odotrack.infrastructure.database import TrackingRepository


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep host environment overrides out of config loading."""
    for name in ("ODOTRACK_CONFIG", "ODOTRACK_DB_PATH", "ODOTRACK_API_KEY", "PORT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "tracking.db"


@pytest.fixture
def repo(db_path):
    return TrackingRepository(db_path)


@pytest.fixture
def ledger(repo):
    return SessionLedger(repo)


@pytest.fixture
def tracker(repo, ledger):
    return LocationTracker(repo, ledger=ledger)
