"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .lines import router as lines_router
from .requests import router as requests_router
from .users import router as users_router
from .vehicles import router as vehicles_router

__all__ = [
    "auth_router",
    "lines_router",
    "requests_router",
    "users_router",
    "vehicles_router",
]
