"""GPS infrastructure - great-circle distance between samples."""

from .distance import EARTH_RADIUS_KM, haversine_km

__all__ = [
    "EARTH_RADIUS_KM",
    "haversine_km",
]
