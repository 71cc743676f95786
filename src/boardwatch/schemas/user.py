"""Account and credential schemas."""

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


def _digits(value: str) -> str:
    return re.sub(r"\D", "", value)


class Credentials(BaseModel):
    """CPF and password pair used to register and to log in."""

    cpf: str = Field(..., description="Brazilian taxpayer number; formatting is ignored")
    password: str

    @field_validator("cpf")
    @classmethod
    def normalize_cpf(cls, value: str) -> str:
        digits = _digits(value)
        if len(digits) != 11:
            raise ValueError("CPF must have 11 digits")
        if len(set(digits)) == 1:
            raise ValueError("CPF is invalid")
        return digits


class RegisterResponse(BaseModel):
    id: str
    message: str


class LoginResponse(BaseModel):
    """Response returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    user_id: str


class UserProfile(BaseModel):
    id: str
    cpf: str = Field(..., description="Masked CPF")
    created_at: datetime
