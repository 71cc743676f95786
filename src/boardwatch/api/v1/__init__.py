"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    lines_router,
    requests_router,
    users_router,
    vehicles_router,
)

__all__ = [
    "auth_router",
    "lines_router",
    "requests_router",
    "users_router",
    "vehicles_router",
]
