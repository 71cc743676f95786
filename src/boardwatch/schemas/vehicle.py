"""Vehicle telemetry and proximity schemas."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator

from boardwatch.schemas._validators import non_blank


class VehicleUpdate(BaseModel):
    """One telemetry sample pushed by a vehicle."""

    vehicle_id: str = Field(..., validation_alias=AliasChoices("vehicle_id", "bus_id"))
    latitude: float
    longitude: float
    speed: float | None = Field(
        None,
        validation_alias=AliasChoices("speed", "velocidade"),
        description="Ground speed in meters per second",
    )
    line_id: str | None = Field(
        None,
        validation_alias=AliasChoices("line_id", "trip_headsign"),
    )
    recorded_at: datetime | None = Field(
        None, description="Device timestamp; the server clock is used when omitted"
    )

    @field_validator("vehicle_id")
    @classmethod
    def strip_vehicle_id(cls, value: str) -> str:
        return non_blank(value)


class VehicleRead(BaseModel):
    """A stored sample, optionally annotated with its distance from a query center."""

    vehicle_id: str
    latitude: float
    longitude: float
    speed: float | None = None
    line_id: str | None = None
    recorded_at: datetime
    distance: float | None = Field(None, description="Meters from the query center")


class VehicleUpdateResponse(BaseModel):
    bus: VehicleRead


class NearbyResponse(BaseModel):
    """Vehicles near a point, closest first."""

    buses: list[VehicleRead]
    last_update: datetime = Field(..., serialization_alias="lastUpdate")


class VehicleHistory(BaseModel):
    vehicle_id: str
    samples: list[VehicleRead]
