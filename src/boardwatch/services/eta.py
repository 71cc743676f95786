"""Arrival-time estimation and debounced near-arrival alerting."""

from __future__ import annotations

import math
from dataclasses import dataclass

from boardwatch.core.settings import settings

__all__ = ["AlertHysteresis", "EtaEstimate", "estimate", "format_seconds"]

INDETERMINATE_LABEL = "Calculating..."


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_seconds(seconds: float) -> str:
    """Render whole seconds below a minute, whole minutes otherwise."""
    if seconds < 60:
        return f"{_round_half_up(seconds)}s"
    return f"{_round_half_up(seconds / 60)} min"


@dataclass(frozen=True)
class EtaEstimate:
    """Estimator output; ``seconds`` is None when the inputs are insufficient."""

    seconds: float | None

    @property
    def indeterminate(self) -> bool:
        return self.seconds is None

    @property
    def label(self) -> str:
        if self.seconds is None:
            return INDETERMINATE_LABEL
        return format_seconds(self.seconds)


INDETERMINATE = EtaEstimate(seconds=None)


def estimate(
    distance_m: float | None,
    speed_mps: float | None,
    min_speed_mps: float | None = None,
) -> EtaEstimate:
    """Estimate time to arrival from distance and current speed.

    Speeds at or below ``min_speed_mps`` (a stationary or crawling vehicle)
    and missing inputs yield an indeterminate estimate.
    """
    floor = settings.eta_min_speed_mps if min_speed_mps is None else min_speed_mps
    if distance_m is None or speed_mps is None or speed_mps <= floor:
        return INDETERMINATE
    seconds = distance_m / speed_mps
    if seconds < 0 or not math.isfinite(seconds):
        return INDETERMINATE
    return EtaEstimate(seconds=seconds)


@dataclass
class AlertHysteresis:
    """One-shot near-arrival alert that re-arms only after leaving the threshold.

    ``armed`` is true once the alert has fired and stays true while estimates
    remain below ``threshold_s``. An estimate at or above the threshold, an
    indeterminate estimate, or no vehicle at all resets it.
    """

    threshold_s: float = settings.eta_alert_threshold_seconds
    armed: bool = False

    def update(self, eta: EtaEstimate | None) -> bool:
        """Feed one estimate; return True exactly when the alert should fire."""
        if eta is None or eta.seconds is None or eta.seconds >= self.threshold_s:
            self.armed = False
            return False
        if self.armed:
            return False
        self.armed = True
        return True

    def reset(self) -> None:
        self.armed = False
