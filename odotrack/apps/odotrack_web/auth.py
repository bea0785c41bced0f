from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import current_app, request

from ...core.security import api_key_matches
from ._responses import json_response

FORBIDDEN_MESSAGE = "Forbidden: Invalid API Key"


def require_api_key(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Auth decorator that reads the shared secret from current_app at request time."""
    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any):
        cfg = current_app.config["ODOTRACK_CONFIG"]
        supplied = request.headers.get(cfg.auth.header)
        if not api_key_matches(supplied, cfg.auth.resolve_api_key()):
            current_app.logger.warning("Rejected %s %s: invalid API key", request.method, request.path)
            return json_response({"message": FORBIDDEN_MESSAGE}, status=403)
        return fn(*args, **kwargs)

    return wrapper
