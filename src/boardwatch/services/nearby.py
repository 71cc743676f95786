"""Nearest-vehicle query engine.

Answers "which vehicles of line L are near point P right now" from the
latest sample of each vehicle. The engine is read-only and keeps no state
between calls, so any number of callers may share it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from boardwatch.core.errors import InvalidInputError
from boardwatch.core.settings import settings
from boardwatch.db.time import as_utc
from boardwatch.models import VehiclePosition
from boardwatch.services.geo import haversine_m, normalize_line, valid_coordinates
from boardwatch.services.positions import PositionStore

__all__ = ["NearbyQueryEngine", "NearbyVehicle"]


@dataclass(frozen=True)
class NearbyVehicle:
    """A vehicle's latest sample annotated with its distance from the query center."""

    vehicle_id: str
    latitude: float
    longitude: float
    speed_mps: float | None
    line_id: str | None
    recorded_at: datetime
    distance_m: float

    @classmethod
    def from_sample(cls, sample: VehiclePosition, distance_m: float) -> NearbyVehicle:
        return cls(
            vehicle_id=sample.vehicle_id,
            latitude=sample.latitude,
            longitude=sample.longitude,
            speed_mps=sample.speed_mps,
            line_id=sample.line_id,
            recorded_at=as_utc(sample.recorded_at),
            distance_m=distance_m,
        )


class NearbyQueryEngine:
    """Distance filter and ranking over :meth:`PositionStore.latest_all`."""

    def __init__(self, store: PositionStore, max_results: int | None = None) -> None:
        self.store = store
        self.max_results = max_results if max_results is not None else settings.nearby_max_results

    def query(
        self,
        latitude: float,
        longitude: float,
        radius_m: float,
        line_filter: str | None = None,
    ) -> list[NearbyVehicle]:
        """Return up to ``max_results`` vehicles within ``radius_m`` of the center.

        Results are ordered by distance, then by vehicle id. When ``line_filter``
        is given only vehicles whose line matches it exactly after trimming and
        case-folding are kept.

        Raises:
            InvalidInputError: If the center is out of range or the radius is
                negative or not finite.
        """
        if not valid_coordinates(latitude, longitude):
            raise InvalidInputError(
                f"Coordinates out of range: latitude={latitude}, longitude={longitude}"
            )
        if not math.isfinite(radius_m) or radius_m < 0:
            raise InvalidInputError(f"Invalid radius: {radius_m}")

        wanted = normalize_line(line_filter)
        matches: list[NearbyVehicle] = []
        for sample in self.store.latest_all():
            distance = haversine_m(latitude, longitude, sample.latitude, sample.longitude)
            if distance > radius_m:
                continue
            if wanted is not None and normalize_line(sample.line_id) != wanted:
                continue
            matches.append(NearbyVehicle.from_sample(sample, distance))

        matches.sort(key=lambda vehicle: (vehicle.distance_m, vehicle.vehicle_id))
        return matches[: self.max_results]
