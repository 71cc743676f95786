"""Tests for arrival estimation and alert debouncing."""

import pytest

from boardwatch.services.eta import AlertHysteresis, EtaEstimate, estimate, format_seconds


@pytest.mark.parametrize(
    ("distance", "speed"),
    [(100.0, None), (None, 5.0), (100.0, 0.0), (100.0, 0.5), (100.0, -3.0), (-10.0, 5.0)],
)
def test_estimate_indeterminate(distance, speed) -> None:
    result = estimate(distance, speed)

    assert result.indeterminate
    assert result.label == "Calculating..."


def test_estimate_seconds_and_minutes() -> None:
    assert estimate(90.0, 5.0).seconds == pytest.approx(18.0)
    assert estimate(90.0, 5.0).label == "18s"
    assert estimate(1800.0, 5.0).label == "6 min"
    assert estimate(100.0, 0.51).label == "3 min"


@pytest.mark.parametrize(
    ("seconds", "label"),
    [(0.0, "0s"), (29.5, "30s"), (59.4, "59s"), (60.0, "1 min"), (89.0, "1 min"), (90.0, "2 min")],
)
def test_format_seconds_rounds_half_up(seconds, label) -> None:
    assert format_seconds(seconds) == label


def test_hysteresis_fires_once_per_approach() -> None:
    hysteresis = AlertHysteresis(threshold_s=20)

    fired = [hysteresis.update(EtaEstimate(s)) for s in [25, 15, 10, 18, 8]]

    # Only the first crossing below the threshold fires; 18 stays below it.
    assert fired == [False, True, False, False, False]


def test_hysteresis_rearms_after_crossing_back() -> None:
    hysteresis = AlertHysteresis(threshold_s=20)

    fired = [hysteresis.update(EtaEstimate(s)) for s in [25, 15, 10, 21, 8]]

    assert fired == [False, True, False, False, True]
    assert hysteresis.armed


def test_hysteresis_threshold_is_exclusive() -> None:
    hysteresis = AlertHysteresis(threshold_s=20)

    assert hysteresis.update(EtaEstimate(20.0)) is False
    assert hysteresis.update(EtaEstimate(19.99)) is True


@pytest.mark.parametrize("reset_with", [None, EtaEstimate(None)])
def test_hysteresis_resets_on_missing_or_indeterminate(reset_with) -> None:
    hysteresis = AlertHysteresis(threshold_s=20)
    assert hysteresis.update(EtaEstimate(5)) is True

    assert hysteresis.update(reset_with) is False
    assert not hysteresis.armed
    assert hysteresis.update(EtaEstimate(5)) is True
