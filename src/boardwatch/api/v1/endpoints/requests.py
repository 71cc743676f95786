"""Boarding request endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from boardwatch.api.v1.dependencies import CurrentUserDep, LifecycleDep
from boardwatch.core.errors import (
    ConflictError,
    InvalidInputError,
    NoActiveRequestError,
    NotFoundError,
)
from boardwatch.db.time import as_utc
from boardwatch.models import BoardingRequest
from boardwatch.schemas.request import (
    BoardingConfirm,
    BoardingConfirmed,
    BoardingRequestCreate,
    BoardingRequestCreated,
    BoardingRequestRead,
)

router = APIRouter(prefix="/requests", tags=["requests"])


def _to_read(request: BoardingRequest) -> BoardingRequestRead:
    read = BoardingRequestRead.model_validate(request)
    read.created_at = as_utc(read.created_at)
    if read.confirmed_at is not None:
        read.confirmed_at = as_utc(read.confirmed_at)
    return read


@router.post("", status_code=status.HTTP_201_CREATED, response_model=BoardingRequestCreated)
async def create_request(
    payload: BoardingRequestCreate,
    current_user: CurrentUserDep,
    lifecycle: LifecycleDep,
) -> BoardingRequestCreated:
    """Create the rider's request, replacing any previous one."""
    try:
        request_id = lifecycle.create_or_replace(
            current_user.id, payload.origin, payload.destination
        )
    except InvalidInputError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return BoardingRequestCreated(id=request_id, message="Boarding request recorded")


@router.get("/current", response_model=BoardingRequestRead)
async def get_current_request(
    current_user: CurrentUserDep,
    lifecycle: LifecycleDep,
) -> BoardingRequestRead:
    """Return the rider's request row."""
    try:
        request = lifecycle.get_current(current_user.id)
    except NotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err
    return _to_read(request)


@router.put("/current", response_model=BoardingConfirmed)
async def confirm_request(
    payload: BoardingConfirm,
    current_user: CurrentUserDep,
    lifecycle: LifecycleDep,
) -> BoardingConfirmed:
    """Confirm boarding and count it towards the line's demand."""
    try:
        result = lifecycle.confirm(current_user.id, payload.line_id)
    except InvalidInputError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    except NoActiveRequestError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err
    except ConflictError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err

    message = "Boarding confirmed" if result.newly_confirmed else "Boarding already confirmed"
    return BoardingConfirmed(message=message, request=_to_read(result.request))
