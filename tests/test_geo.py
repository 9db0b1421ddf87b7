from __future__ import annotations

import math

import pytest

from aquasafe.app.geo import Coordinate, InvalidCoordinateError, distance_km, validate_coordinate


NYC = Coordinate(40.7128, -74.0060)
LA = Coordinate(34.0522, -118.2437)


def test_distance_is_symmetric():
    assert distance_km(NYC, LA) == pytest.approx(distance_km(LA, NYC))


def test_distance_zero_for_same_point():
    assert distance_km(NYC, NYC) == pytest.approx(0.0, abs=1e-9)


def test_distance_nyc_to_la():
    assert distance_km(NYC, LA) == pytest.approx(3936, abs=5)


def test_distance_antipodal_points_do_not_blow_up():
    d = distance_km(Coordinate(0, 0), Coordinate(0, 180))
    assert d == pytest.approx(math.pi * 6371, rel=1e-9)


def test_validate_coordinate_accepts_bounds():
    assert validate_coordinate(90, -180) == Coordinate(90.0, -180.0)
    assert validate_coordinate("40.5", "-73.9") == Coordinate(40.5, -73.9)


@pytest.mark.parametrize(
    "lat,lng",
    [(91, 0), (0, 181), (-90.5, 0), (float("nan"), 0), (0, float("inf")), ("abc", 0), (None, 0)],
)
def test_validate_coordinate_rejects(lat, lng):
    with pytest.raises(InvalidCoordinateError):
        validate_coordinate(lat, lng)
