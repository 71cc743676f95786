"""Async client for riders tracking an approaching vehicle."""

from .api import BoardingApiClient, NearbyResult
from .retry import submit_with_retry
from .session import SessionState, StopLocation, TrackingSession, TrackingUpdate

__all__ = [
    "BoardingApiClient",
    "NearbyResult",
    "SessionState",
    "StopLocation",
    "TrackingSession",
    "TrackingUpdate",
    "submit_with_retry",
]
