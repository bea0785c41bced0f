"""SQLite database schema for session and location tracking."""

TRACKING_SCHEMA = """
-- ============================================
-- odotrack Tracking Database Schema
-- Version: 1.0.0
-- ============================================

-- Sessions (one distance total per session)
CREATE TABLE IF NOT EXISTS sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    start_time TEXT NOT NULL,
    end_time TEXT,                     -- NULL while the session is open
    distance REAL NOT NULL DEFAULT 0 CHECK (distance >= 0)  -- km
);

-- Location samples (id doubles as a monotonic sequence)
CREATE TABLE IF NOT EXISTS locations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    latitude REAL NOT NULL,
    longitude REAL NOT NULL,
    distance REAL NOT NULL DEFAULT 0 CHECK (distance >= 0),  -- km from previous sample
    timestamp TEXT NOT NULL,
    session_id INTEGER
);

-- ============================================
-- INDEXES
-- ============================================

-- At most one open session
CREATE UNIQUE INDEX IF NOT EXISTS ux_sessions_open
    ON sessions((end_time IS NULL)) WHERE end_time IS NULL;

CREATE INDEX IF NOT EXISTS idx_sessions_start ON sessions(start_time);
CREATE INDEX IF NOT EXISTS idx_locations_timestamp ON locations(timestamp);
"""
