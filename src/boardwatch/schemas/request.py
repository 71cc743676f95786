"""Boarding request schemas."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, field_validator

from boardwatch.models.request import RequestState
from boardwatch.schemas._validators import non_blank


class BoardingRequestCreate(BaseModel):
    """Payload submitted when a rider asks to track a line from a stop."""

    origin: str = Field(..., description="Human-readable description of the boarding stop")
    destination: str = Field(..., description="Line identifier the rider wants to board")
    requested: StrictBool = Field(..., description="Must be the JSON literal true")

    @field_validator("origin", "destination")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return non_blank(value)

    @field_validator("requested")
    @classmethod
    def check_requested(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("requested must be true")
        return value


class BoardingRequestCreated(BaseModel):
    """Response for a created or replaced request."""

    id: int
    message: str


class BoardingConfirm(BaseModel):
    """Payload confirming that the rider boarded."""

    line_id: str = Field(
        ...,
        validation_alias=AliasChoices("line_id", "trip_headsign"),
        description="Line the rider boarded",
    )

    @field_validator("line_id")
    @classmethod
    def strip_line(cls, value: str) -> str:
        return non_blank(value)


class BoardingRequestRead(BaseModel):
    """Stored boarding request as returned to its owner."""

    id: int
    user_id: str
    origin: str
    line_id: str
    requested: bool
    state: RequestState
    created_at: datetime
    confirmed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class BoardingConfirmed(BaseModel):
    """Response for a successful confirmation."""

    message: str
    request: BoardingRequestRead
