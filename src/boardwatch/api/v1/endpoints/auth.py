"""Authentication endpoints for the Boardwatch API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from boardwatch.api.v1.dependencies import SessionDep
from boardwatch.core.security import create_access_token, hash_password, verify_password
from boardwatch.core.settings import settings
from boardwatch.models import User
from boardwatch.schemas.user import Credentials, LoginResponse, RegisterResponse

router = APIRouter(prefix="/auth", tags=["authentication"])

logger = logging.getLogger(__name__)


@router.post(
    "/register",
    summary="Register a rider account",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
)
async def register_user(payload: Credentials, db: SessionDep) -> RegisterResponse:
    """Create an account keyed by CPF."""
    if len(payload.password) < settings.password_min_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must have at least {settings.password_min_length} characters",
        )

    if db.scalar(select(User.id).where(User.cpf == payload.cpf)) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="CPF already registered")

    user = User(cpf=payload.cpf, password_hash=hash_password(payload.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="CPF already registered"
        ) from err
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return RegisterResponse(id=user.id, message="Registration successful")


@router.post(
    "/login",
    summary="Exchange credentials for a bearer token",
    response_model=LoginResponse,
)
async def login_user(payload: Credentials, db: SessionDep) -> LoginResponse:
    """Authenticate with CPF and password."""
    user = db.scalar(select(User).where(User.cpf == payload.cpf))
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid CPF or password",
        )
    return LoginResponse(access_token=create_access_token(user.id), user_id=user.id)
