from __future__ import annotations

from flask import Flask, Response

from ...config import OdoConfig
from ...core import LocationTracker
from ...domain.errors import (
    ConflictError,
    NotFoundError,
    PartialWipeError,
    StoreError,
    TrackerError,
    ValidationError,
)
from ...infrastructure.database import TrackingRepository
from ._responses import json_response
from .api import tracking_bp

ERROR_STATUS: dict[type[TrackerError], int] = {
    ValidationError: 400,
    ConflictError: 400,
    NotFoundError: 400,
    StoreError: 500,
}


def status_for(exc: TrackerError) -> int:
    for kind in type(exc).__mro__:
        if kind in ERROR_STATUS:
            return ERROR_STATUS[kind]
    return 500


def build_tracker(cfg: OdoConfig) -> LocationTracker:
    repo = TrackingRepository(cfg.storage.db_path, busy_timeout=cfg.storage.busy_timeout_secs)
    return LocationTracker(
        repo,
        strict_bounds=cfg.tracking.strict_bounds,
        atomic_wipe=cfg.storage.atomic_wipe,
    )


def create_app(cfg: OdoConfig, tracker: LocationTracker | None = None) -> Flask:
    app = Flask(__name__)
    app.config["ODOTRACK_CONFIG"] = cfg
    app.config["ODOTRACK_TRACKER"] = tracker or build_tracker(cfg)

    @app.errorhandler(TrackerError)
    def _tracker_error(exc: TrackerError) -> Response:
        status = status_for(exc)
        if isinstance(exc, PartialWipeError):
            app.logger.error("Inconsistent wipe: %s", exc)
            return json_response(
                {"message": str(exc), "partial": True, "locationsDeleted": exc.locations_deleted},
                status=status,
            )
        if status >= 500:
            app.logger.error("Store failure: %s", exc)
            return json_response({"message": "Internal Server Error"}, status=status)
        return json_response({"message": str(exc)}, status=status)

    if cfg.web.cors_origin:
        @app.after_request
        def _cors(response: Response) -> Response:
            response.headers["Access-Control-Allow-Origin"] = cfg.web.cors_origin
            response.headers["Access-Control-Allow-Headers"] = f"Content-Type, {cfg.auth.header}"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
            return response

    app.register_blueprint(tracking_bp)
    if not cfg.auth.resolve_api_key():
        app.logger.warning("No API key configured (%s); write endpoints will reject all requests", cfg.auth.api_key_env)
    app.logger.info("Tracking API on http://%s:%d/", cfg.web.bind_host, cfg.web.bind_port)
    return app
