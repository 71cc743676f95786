"""Tests for the vehicle position store."""

from datetime import timedelta

import pytest

from boardwatch.core.errors import InvalidInputError
from boardwatch.db.time import as_utc
from boardwatch.models import LineDemandCounter, VehiclePosition
from boardwatch.services.demand import DemandCounter
from boardwatch.services.positions import PositionStore


def test_ingest_appends_sample(db_session) -> None:
    store = PositionStore(db_session)

    sample = store.ingest("bus-1", -23.5, -46.6, speed_mps=8.0, line_id="Centro")

    assert sample.id is not None
    assert sample.vehicle_id == "bus-1"
    assert sample.line_id == "Centro"
    assert db_session.query(VehiclePosition).count() == 1


@pytest.mark.parametrize(
    ("lat", "lon"),
    [(91.0, 0.0), (-90.5, 0.0), (0.0, 181.0), (0.0, -200.0), (float("inf"), 0.0)],
)
def test_ingest_rejects_out_of_range_coordinates(db_session, lat, lon) -> None:
    store = PositionStore(db_session)

    with pytest.raises(InvalidInputError):
        store.ingest("bus-1", lat, lon)

    assert db_session.query(VehiclePosition).count() == 0


def test_ingest_rejects_blank_vehicle_and_negative_speed(db_session) -> None:
    store = PositionStore(db_session)

    with pytest.raises(InvalidInputError):
        store.ingest("  ", 0.0, 0.0)
    with pytest.raises(InvalidInputError):
        store.ingest("bus-1", 0.0, 0.0, speed_mps=-1.0)

    assert db_session.query(VehiclePosition).count() == 0


def test_ingest_registers_line_once(db_session) -> None:
    store = PositionStore(db_session)
    demand = DemandCounter(db_session)

    store.ingest("bus-1", 0.0, 0.0, line_id="X")
    demand.increment("X")
    db_session.commit()
    store.ingest("bus-2", 0.0, 0.0, line_id=" x ")

    counters = db_session.query(LineDemandCounter).all()
    assert [(c.line_id, c.total_confirmations) for c in counters] == [("x", 1)]


def test_ingest_without_line_creates_no_counter(db_session) -> None:
    PositionStore(db_session).ingest("bus-1", 0.0, 0.0)

    assert db_session.query(LineDemandCounter).count() == 0


def test_latest_all_returns_one_sample_per_vehicle(db_session, t0) -> None:
    store = PositionStore(db_session)
    store.ingest("bus-1", 0.0, 0.0, recorded_at=t0)
    store.ingest("bus-1", 0.0, 0.001, recorded_at=t0 + timedelta(seconds=10))
    store.ingest("bus-2", 1.0, 1.0, recorded_at=t0)

    latest = store.latest_all()

    assert [s.vehicle_id for s in latest] == ["bus-1", "bus-2"]
    assert latest[0].longitude == 0.001


def test_older_sample_does_not_replace_latest(db_session, t0) -> None:
    store = PositionStore(db_session)
    store.ingest("bus-1", 0.0, 0.002, recorded_at=t0 + timedelta(seconds=30))
    store.ingest("bus-1", 0.0, 0.001, recorded_at=t0)

    (latest,) = store.latest_all()

    assert latest.longitude == 0.002
    assert as_utc(latest.recorded_at) == t0 + timedelta(seconds=30)


def test_history_is_ascending_and_bounded(db_session, t0) -> None:
    store = PositionStore(db_session)
    for offset in (30, 0, 20, 10):
        store.ingest("bus-1", 0.0, offset / 1000, recorded_at=t0 + timedelta(seconds=offset))
    store.ingest("bus-2", 0.0, 0.0, recorded_at=t0 + timedelta(seconds=15))

    samples = store.history("bus-1", t0 + timedelta(seconds=10))

    assert [as_utc(s.recorded_at) for s in samples] == [
        t0 + timedelta(seconds=10),
        t0 + timedelta(seconds=20),
        t0 + timedelta(seconds=30),
    ]
    # Pure query: asking again yields the same sequence.
    assert [s.id for s in store.history("bus-1", t0 + timedelta(seconds=10))] == [
        s.id for s in samples
    ]
