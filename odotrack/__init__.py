"""odotrack - session-based position tracking with distance accrual."""

__version__ = "0.1.0"
