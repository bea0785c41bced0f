"""
Tracking API Endpoints
======================

JSON endpoints for the reporter and readers.

Endpoints:
- POST /start-session   - open a session (API key)
- POST /end-session     - end the open session (API key)
- GET  /get-session     - summary of the latest session
- POST /update-location - record a sample (API key)
- GET  /get-location    - latest sample or null
- POST /wipe-data       - delete everything, body {"confirm": "CONFIRM"} (API key)
- GET  /health          - liveness
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, Response, current_app, request

from ...core import LocationTracker
from ._responses import json_response
from .auth import require_api_key

logger = logging.getLogger(__name__)

tracking_bp = Blueprint("tracking", __name__)


def _tracker() -> LocationTracker:
    return current_app.config["ODOTRACK_TRACKER"]


def _json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


@tracking_bp.post("/start-session")
@require_api_key
def start_session() -> Response:
    session = _tracker().ledger.start_session()
    return json_response({"message": "Session started successfully", "session": session.to_wire()})


@tracking_bp.post("/end-session")
@require_api_key
def end_session() -> Response:
    session = _tracker().ledger.end_session()
    return json_response({"message": "Session ended successfully", "session": session.to_wire()})


@tracking_bp.get("/get-session")
def get_session() -> Response:
    summary = _tracker().get_current_session_summary()
    return json_response(summary.to_wire())


@tracking_bp.post("/update-location")
@require_api_key
def update_location() -> Response:
    body = _json_body()
    sample = _tracker().record_sample(body.get("latitude"), body.get("longitude"))
    return json_response({"message": "Location updated successfully", "location": sample.to_wire()})


@tracking_bp.get("/get-location")
def get_location() -> Response:
    sample = _tracker().get_latest_location()
    return json_response(sample.to_wire() if sample is not None else None)


@tracking_bp.post("/wipe-data")
@require_api_key
def wipe_data() -> Response:
    result = _tracker().wipe_all(_json_body().get("confirm"))
    return json_response({"message": "Data wiped successfully", "deleted": result.to_wire()})


@tracking_bp.get("/health")
def health() -> Response:
    return json_response({"ok": True})
