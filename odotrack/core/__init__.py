"""odotrack Core - session ledger, location tracker and input guards."""

from .ledger import SessionLedger
from .tracker import WIPE_CONFIRMATION, LocationTracker

__all__ = [
    "LocationTracker",
    "SessionLedger",
    "WIPE_CONFIRMATION",
]
