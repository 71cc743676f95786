"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from boardwatch.core.errors import UnauthenticatedError
from boardwatch.core.security import decode_access_token
from boardwatch.db.session import get_db
from boardwatch.models import User
from boardwatch.services.demand import DemandCounter
from boardwatch.services.lifecycle import RequestLifecycleManager
from boardwatch.services.nearby import NearbyQueryEngine
from boardwatch.services.positions import PositionStore

# Missing credentials are reported by get_current_user so the status stays 401.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from the bearer token.

    Raises:
        HTTPException: 401 if no credential was sent, 403 if the token is
            invalid, expired or names an unknown user.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        user_id = decode_access_token(credentials.credentials)
    except UnauthenticatedError as err:
        raise HTTPException(status_code=err.status_code, detail=str(err)) from err

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not found")
    return user


def get_demand_counter(db: SessionDep) -> DemandCounter:
    return DemandCounter(db)


def get_position_store(db: SessionDep) -> PositionStore:
    return PositionStore(db)


def get_nearby_engine(
    store: Annotated[PositionStore, Depends(get_position_store)],
) -> NearbyQueryEngine:
    return NearbyQueryEngine(store)


def get_lifecycle_manager(db: SessionDep) -> RequestLifecycleManager:
    return RequestLifecycleManager(db)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
DemandCounterDep = Annotated[DemandCounter, Depends(get_demand_counter)]
PositionStoreDep = Annotated[PositionStore, Depends(get_position_store)]
NearbyEngineDep = Annotated[NearbyQueryEngine, Depends(get_nearby_engine)]
LifecycleDep = Annotated[RequestLifecycleManager, Depends(get_lifecycle_manager)]
