"""Tests for the nearest-vehicle query engine."""

import math
from datetime import timedelta

import pytest

from boardwatch.core.errors import InvalidInputError
from boardwatch.services.eta import estimate
from boardwatch.services.geo import EARTH_RADIUS_M, haversine_m
from boardwatch.services.nearby import NearbyQueryEngine
from boardwatch.services.positions import PositionStore

METERS_PER_DEGREE = EARTH_RADIUS_M * math.pi / 180


def _north_of_origin(meters: float) -> float:
    return meters / METERS_PER_DEGREE


@pytest.fixture()
def store(db_session) -> PositionStore:
    return PositionStore(db_session)


@pytest.fixture()
def engine(store) -> NearbyQueryEngine:
    return NearbyQueryEngine(store)


def test_example_scenario_orders_by_distance(store, engine) -> None:
    store.ingest("V1", _north_of_origin(1800), 0.0, speed_mps=5.0, line_id="X")
    store.ingest("V2", _north_of_origin(90), 0.0, speed_mps=5.0, line_id="X")
    store.ingest("V3", _north_of_origin(50), 0.0, speed_mps=5.0, line_id="Y")

    result = engine.query(0.0, 0.0, 2000, "x")

    assert [v.vehicle_id for v in result] == ["V2", "V1"]
    assert result[0].distance_m == pytest.approx(90)
    assert result[1].distance_m == pytest.approx(1800)
    assert estimate(result[1].distance_m, result[1].speed_mps).label == "6 min"
    assert estimate(result[0].distance_m, result[0].speed_mps).seconds == pytest.approx(18)


def test_radius_is_inclusive_and_exact(store, engine) -> None:
    store.ingest("bus-1", 0.0, 0.01)
    distance = haversine_m(0.0, 0.0, 0.0, 0.01)

    assert [v.vehicle_id for v in engine.query(0.0, 0.0, distance)] == ["bus-1"]
    assert engine.query(0.0, 0.0, math.nextafter(distance, 0.0)) == []


def test_line_filter_is_trimmed_case_insensitive_equality(store, engine) -> None:
    store.ingest("a", 0.0, 0.0, line_id=" Centro ")
    store.ingest("b", 0.0, 0.0, line_id="Centro Norte")
    store.ingest("c", 0.0, 0.0)

    result = engine.query(0.0, 0.0, 100, "  CENTRO")

    assert [v.vehicle_id for v in result] == ["a"]


def test_without_filter_all_lines_are_returned(store, engine) -> None:
    store.ingest("a", 0.0, 0.0, line_id="X")
    store.ingest("b", 0.0, 0.0)

    assert {v.vehicle_id for v in engine.query(0.0, 0.0, 10)} == {"a", "b"}


def test_ties_break_on_vehicle_id(store, engine) -> None:
    for vehicle_id in ("c", "a", "b"):
        store.ingest(vehicle_id, 0.0, 0.001)

    assert [v.vehicle_id for v in engine.query(0.0, 0.0, 500)] == ["a", "b", "c"]


def test_result_is_capped_at_ten(store, engine) -> None:
    for index in range(12):
        store.ingest(f"bus-{index:02d}", _north_of_origin(10 * (index + 1)), 0.0)

    result = engine.query(0.0, 0.0, 1000)

    assert len(result) == 10
    assert result[-1].vehicle_id == "bus-09"


def test_only_latest_sample_is_considered(store, engine, t0) -> None:
    # Older sample is inside the radius, newer one is outside.
    store.ingest("bus-1", _north_of_origin(100), 0.0, recorded_at=t0)
    store.ingest("bus-1", _north_of_origin(5000), 0.0, recorded_at=t0 + timedelta(seconds=5))

    assert engine.query(0.0, 0.0, 1000) == []

    (vehicle,) = engine.query(0.0, 0.0, 10_000)
    assert vehicle.distance_m == pytest.approx(5000)
    assert vehicle.recorded_at == t0 + timedelta(seconds=5)


@pytest.mark.parametrize(
    ("lat", "lon", "radius"),
    [(95.0, 0.0, 100.0), (0.0, 0.0, -1.0), (0.0, 0.0, float("nan"))],
)
def test_invalid_query_is_rejected(engine, lat, lon, radius) -> None:
    with pytest.raises(InvalidInputError):
        engine.query(lat, lon, radius)
