"""Append-only store of vehicle telemetry samples."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from boardwatch.core.errors import InvalidInputError
from boardwatch.db.time import as_utc, utcnow
from boardwatch.models import VehiclePosition
from boardwatch.services.demand import DemandCounter
from boardwatch.services.geo import valid_coordinates

__all__ = ["PositionStore"]

logger = logging.getLogger(__name__)


class PositionStore:
    """Ingestion and read access for ``vehicle_positions``."""

    def __init__(self, session: Session, demand: DemandCounter | None = None) -> None:
        self.session = session
        self.demand = demand or DemandCounter(session)

    def ingest(
        self,
        vehicle_id: str,
        latitude: float,
        longitude: float,
        speed_mps: float | None = None,
        line_id: str | None = None,
        recorded_at: datetime | None = None,
    ) -> VehiclePosition:
        """Append one sample and lazily register its line with the demand counter.

        Raises:
            InvalidInputError: If the vehicle id is blank, the coordinates are out of
                range, or the speed is negative or not finite. Nothing is written.
        """
        vehicle_id = (vehicle_id or "").strip()
        if not vehicle_id:
            raise InvalidInputError("vehicle_id is required")
        if not valid_coordinates(latitude, longitude):
            raise InvalidInputError(
                f"Coordinates out of range: latitude={latitude}, longitude={longitude}"
            )
        if speed_mps is not None and (not math.isfinite(speed_mps) or speed_mps < 0):
            raise InvalidInputError(f"Invalid speed: {speed_mps}")

        line = line_id.strip() if line_id and line_id.strip() else None
        sample = VehiclePosition(
            vehicle_id=vehicle_id,
            latitude=latitude,
            longitude=longitude,
            speed_mps=speed_mps,
            line_id=line,
            recorded_at=as_utc(recorded_at) if recorded_at else utcnow(),
        )
        try:
            self.session.add(sample)
            if line is not None:
                self.demand.ensure(line)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(sample)
        logger.debug("Ingested sample for vehicle %s (line=%s)", vehicle_id, line)
        return sample

    def latest_all(self) -> list[VehiclePosition]:
        """Return the most recent sample of every vehicle, one row per vehicle.

        Ties on ``recorded_at`` resolve to the later insert.
        """
        ranked = select(
            VehiclePosition.id.label("id"),
            func.row_number()
            .over(
                partition_by=VehiclePosition.vehicle_id,
                order_by=(VehiclePosition.recorded_at.desc(), VehiclePosition.id.desc()),
            )
            .label("rank"),
        ).subquery()
        stmt = (
            select(VehiclePosition)
            .join(ranked, ranked.c.id == VehiclePosition.id)
            .where(ranked.c.rank == 1)
            .order_by(VehiclePosition.vehicle_id)
        )
        return list(self.session.scalars(stmt))

    def history(self, vehicle_id: str, since: datetime) -> Sequence[VehiclePosition]:
        """Return samples of ``vehicle_id`` no older than ``since``, oldest first."""
        stmt = (
            select(VehiclePosition)
            .where(
                VehiclePosition.vehicle_id == vehicle_id,
                VehiclePosition.recorded_at >= as_utc(since),
            )
            .order_by(VehiclePosition.recorded_at.asc(), VehiclePosition.id.asc())
        )
        return list(self.session.scalars(stmt))
