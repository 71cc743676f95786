"""Vehicle telemetry and proximity endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta

from fastapi import APIRouter, HTTPException, Query, status

from boardwatch.api.v1.dependencies import (
    CurrentUserDep,
    NearbyEngineDep,
    PositionStoreDep,
)
from boardwatch.core.errors import InvalidInputError
from boardwatch.core.settings import settings
from boardwatch.db.time import as_utc, utcnow
from boardwatch.models import VehiclePosition
from boardwatch.schemas.vehicle import (
    NearbyResponse,
    VehicleHistory,
    VehicleRead,
    VehicleUpdate,
    VehicleUpdateResponse,
)
from boardwatch.services.nearby import NearbyVehicle

router = APIRouter(prefix="/vehicles", tags=["vehicles"])

DEFAULT_HISTORY_WINDOW = timedelta(hours=1)


def _sample_to_read(sample: VehiclePosition) -> VehicleRead:
    return VehicleRead(
        vehicle_id=sample.vehicle_id,
        latitude=sample.latitude,
        longitude=sample.longitude,
        speed=sample.speed_mps,
        line_id=sample.line_id,
        recorded_at=as_utc(sample.recorded_at),
    )


def _nearby_to_read(vehicle: NearbyVehicle) -> VehicleRead:
    return VehicleRead(
        vehicle_id=vehicle.vehicle_id,
        latitude=vehicle.latitude,
        longitude=vehicle.longitude,
        speed=vehicle.speed_mps,
        line_id=vehicle.line_id,
        recorded_at=vehicle.recorded_at,
        distance=vehicle.distance_m,
    )


@router.post(
    "/update",
    status_code=status.HTTP_201_CREATED,
    response_model=VehicleUpdateResponse,
)
async def update_vehicle(
    payload: VehicleUpdate,
    _: CurrentUserDep,
    store: PositionStoreDep,
) -> VehicleUpdateResponse:
    """Append one telemetry sample."""
    try:
        sample = store.ingest(
            payload.vehicle_id,
            payload.latitude,
            payload.longitude,
            speed_mps=payload.speed,
            line_id=payload.line_id,
            recorded_at=payload.recorded_at,
        )
    except InvalidInputError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return VehicleUpdateResponse(bus=_sample_to_read(sample))


@router.get("/nearby", response_model=NearbyResponse)
async def nearby_vehicles(
    _: CurrentUserDep,
    engine: NearbyEngineDep,
    latitude: float = Query(...),
    longitude: float = Query(...),
    radius_km: float = Query(default=settings.nearby_default_radius_km),
    line: str | None = Query(default=None),
) -> NearbyResponse:
    """List the closest vehicles around a point, optionally for one line."""
    try:
        vehicles = engine.query(latitude, longitude, radius_km * 1000.0, line_filter=line)
    except InvalidInputError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return NearbyResponse(
        buses=[_nearby_to_read(vehicle) for vehicle in vehicles],
        last_update=utcnow(),
    )


@router.get("/{vehicle_id}/history", response_model=VehicleHistory)
async def vehicle_history(
    vehicle_id: str,
    _: CurrentUserDep,
    store: PositionStoreDep,
    since: datetime | None = Query(default=None),
) -> VehicleHistory:
    """Return a vehicle's samples since ``since`` (default: the last hour), oldest first."""
    start = since if since is not None else utcnow() - DEFAULT_HISTORY_WINDOW
    samples = store.history(vehicle_id, start)
    return VehicleHistory(
        vehicle_id=vehicle_id,
        samples=[_sample_to_read(sample) for sample in samples],
    )
