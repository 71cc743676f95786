"""Tests for geodesy helpers."""

import math

import pytest

from boardwatch.services.geo import haversine_m, normalize_line, valid_coordinates


def test_haversine_zero_distance() -> None:
    assert haversine_m(-23.55, -46.63, -23.55, -46.63) == 0.0


def test_haversine_one_degree_of_latitude() -> None:
    # One degree along a meridian is R * pi / 180.
    expected = 6_371_000.0 * math.pi / 180
    assert haversine_m(0.0, 0.0, 1.0, 0.0) == pytest.approx(expected, rel=1e-12)


def test_haversine_is_symmetric() -> None:
    a = haversine_m(-23.5505, -46.6333, -22.9068, -43.1729)
    b = haversine_m(-22.9068, -43.1729, -23.5505, -46.6333)
    assert a == pytest.approx(b)
    # Sao Paulo to Rio de Janeiro is roughly 360 km.
    assert 350_000 < a < 370_000


def test_haversine_antipodal_points() -> None:
    assert haversine_m(0.0, 0.0, 0.0, 180.0) == pytest.approx(math.pi * 6_371_000.0)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("  Centro ", "centro"), ("X", "x"), ("", None), ("   ", None), (None, None)],
)
def test_normalize_line(raw, expected) -> None:
    assert normalize_line(raw) == expected


def test_valid_coordinates() -> None:
    assert valid_coordinates(90.0, 180.0)
    assert valid_coordinates(-90.0, -180.0)
    assert not valid_coordinates(90.0001, 0.0)
    assert not valid_coordinates(0.0, -180.5)
    assert not valid_coordinates(float("nan"), 0.0)
