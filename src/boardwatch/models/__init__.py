"""SQLAlchemy models for the Boardwatch application."""

from .line_demand import LineDemandCounter
from .request import BoardingRequest, RequestState
from .user import User
from .vehicle import VehiclePosition

__all__ = [
    "BoardingRequest", "RequestState",
    "LineDemandCounter",
    "User",
    "VehiclePosition",
]
