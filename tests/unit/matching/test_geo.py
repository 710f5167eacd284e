"""Tests for great-circle distance helpers."""

import math

import pytest


class TestHaversine:
    def test_identical_points_are_zero(self):
        from community_match.matching.geo import haversine_km

        assert haversine_km(-27.47, 153.03, -27.47, 153.03) == 0.0

    def test_symmetric(self):
        from community_match.matching.geo import haversine_km

        there = haversine_km(-33.87, 151.21, -37.81, 144.96)
        back = haversine_km(-37.81, 144.96, -33.87, 151.21)
        assert there == pytest.approx(back)

    def test_known_distance_sydney_melbourne(self):
        from community_match.matching.geo import haversine_km

        assert haversine_km(-33.87, 151.21, -37.81, 144.96) == pytest.approx(714, abs=5)

    def test_antipodal_points_are_stable(self):
        from community_match.matching.geo import EARTH_RADIUS_KM, haversine_km

        distance = haversine_km(0.0, 0.0, 0.0, 180.0)
        assert not math.isnan(distance)
        assert distance == pytest.approx(math.pi * EARTH_RADIUS_KM)


class TestDistanceBetween:
    def test_unknown_when_either_side_missing(self):
        from community_match.matching.geo import distance_between
        from community_match.profiles.models import Location

        here = Location(latitude=1.0, longitude=1.0)
        assert distance_between(here, None) is None
        assert distance_between(None, here) is None
        assert distance_between(None, None) is None

    def test_known_locations(self):
        from community_match.matching.geo import distance_between
        from community_match.profiles.models import Location

        a = Location(latitude=0.0, longitude=0.0)
        b = Location(latitude=math.degrees(10 / 6371.0), longitude=0.0)
        assert distance_between(a, b) == pytest.approx(10.0)
