"""
Security utilities for odotrack.

Provides input validation for coordinate samples and API key checks.
"""
from __future__ import annotations

import hmac
import math
from typing import Any

from ..domain.errors import ValidationError

LATITUDE_BOUNDS = (-90.0, 90.0)
LONGITUDE_BOUNDS = (-180.0, 180.0)

# =============================================================================
# INPUT VALIDATION
# =============================================================================

def coerce_coordinate(
    name: str,
    value: Any,
    bounds: tuple[float, float] | None = None,
) -> float:
    """
    Validate one coordinate and return it as float.

    Accepts int and float only: bools and numeric strings are rejected,
    as are NaN and infinities, which would poison the session total.
    ``bounds`` enables an inclusive range check.
    """
    if value is None:
        raise ValidationError("Latitude and Longitude are required")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number")
    try:
        result = float(value)
    except OverflowError as exc:
        raise ValidationError(f"{name} must be finite") from exc
    if not math.isfinite(result):
        raise ValidationError(f"{name} must be finite")
    if bounds is not None and not bounds[0] <= result <= bounds[1]:
        raise ValidationError(f"{name} must be between {bounds[0]:g} and {bounds[1]:g}")
    return result


# =============================================================================
# TOKEN SECURITY
# =============================================================================

def api_key_matches(supplied: str | None, expected: str | None) -> bool:
    """
    Compare a supplied API key with the configured one in constant time.

    No configured key never matches.
    """
    if not expected:
        return False
    return hmac.compare_digest((supplied or "").encode(), expected.encode())
