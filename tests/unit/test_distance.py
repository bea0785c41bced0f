"""
Distance Unit Tests
===================

Tests for the haversine great-circle distance.
"""

import math

import pytest

from odotrack.infrastructure.gps.distance import EARTH_RADIUS_KM, haversine_km


class TestHaversineFormula:
    """Tests for haversine distance calculation."""

    def test_equator_one_degree(self):
        """One degree longitude at equator is ~111.19km."""
        d = haversine_km(0, 0, 0, 1)
        assert d == pytest.approx(111.19, abs=0.01)

    def test_known_distance_istanbul_ankara(self):
        """Test with known city distance."""
        # Istanbul to Ankara is approximately 350km
        d = haversine_km(41.0082, 28.9784, 39.9334, 32.8597)
        assert 340 < d < 360

    def test_symmetry(self):
        """Distance A->B should equal B->A."""
        pairs = [
            ((41.0, 29.0), (42.0, 30.0)),
            ((-33.9, 151.2), (51.5, -0.1)),
            ((89.9, 10.0), (-89.9, -170.0)),
            ((0.0, 179.5), (0.0, -179.5)),
        ]
        for (lat1, lon1), (lat2, lon2) in pairs:
            d1 = haversine_km(lat1, lon1, lat2, lon2)
            d2 = haversine_km(lat2, lon2, lat1, lon1)
            assert d1 == pytest.approx(d2, rel=1e-12)

    @pytest.mark.parametrize(
        "lat, lon",
        [(0.0, 0.0), (41.0, 29.0), (90.0, 0.0), (-90.0, 45.0), (0.0, 180.0), (0.0, -180.0)],
    )
    def test_same_point_zero_distance(self, lat, lon):
        """Same point should return exactly 0, including poles and antimeridian."""
        d = haversine_km(lat, lon, lat, lon)
        assert d == 0.0

    def test_antimeridian_alias_is_near_zero(self):
        """180 and -180 longitude are the same meridian."""
        d = haversine_km(0.0, 180.0, 0.0, -180.0)
        assert not math.isnan(d)
        assert d == pytest.approx(0.0, abs=1e-9)

    def test_antipodal_points_half_circumference(self):
        """Antipodes should be pi * R apart, not NaN."""
        d = haversine_km(0.0, 0.0, 0.0, 180.0)
        assert not math.isnan(d)
        assert d == pytest.approx(math.pi * EARTH_RADIUS_KM, rel=1e-9)

    def test_pole_to_pole(self):
        """North pole to south pole is half a great circle."""
        d = haversine_km(90.0, 0.0, -90.0, 0.0)
        assert d == pytest.approx(math.pi * EARTH_RADIUS_KM, rel=1e-9)

    def test_extreme_finite_inputs_stay_finite(self):
        d = haversine_km(1e308, 1e308, -1e308, -1e308)
        assert math.isfinite(d)
        assert 0.0 <= d <= math.pi * EARTH_RADIUS_KM

    def test_never_negative(self):
        """Distance is non-negative for arbitrary inputs."""
        for lat1, lon1, lat2, lon2 in [(10, 10, -10, -10), (-45, 100, 45, -80), (0, 0, 1e-9, 0)]:
            assert haversine_km(lat1, lon1, lat2, lon2) >= 0.0
