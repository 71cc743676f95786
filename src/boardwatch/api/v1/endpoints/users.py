"""Rider profile endpoints."""

from fastapi import APIRouter

from boardwatch.api.v1.dependencies import CurrentUserDep
from boardwatch.db.time import as_utc
from boardwatch.schemas.user import UserProfile

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserProfile)
async def read_current_user(current_user: CurrentUserDep) -> UserProfile:
    """Return the profile of the bearer's account."""
    return UserProfile(
        id=current_user.id,
        cpf=current_user.masked_cpf,
        created_at=as_utc(current_user.created_at),
    )
