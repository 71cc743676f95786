# tests/v1/test_auth.py
"""Tests for authentication endpoints and bearer-token handling."""

from __future__ import annotations

from datetime import timedelta

from fastapi import status
from jose import jwt

from boardwatch.core.security import create_access_token
from boardwatch.core.settings import settings
from boardwatch.db.time import utcnow


def test_register_and_login(client) -> None:
    """A registered rider can log in and read their masked profile."""
    response = client.post(
        "/api/auth/register",
        json={"cpf": "529.982.247-25", "password": "hunter22"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    user_id = response.json()["id"]

    response = client.post("/api/auth/login", json={"cpf": "52998224725", "password": "hunter22"})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user_id"] == user_id

    response = client.get(
        "/api/users/me", headers={"Authorization": f"Bearer {data['access_token']}"}
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["cpf"] == "*********25"


def test_register_duplicate_cpf(client, test_user) -> None:
    """Registering an existing CPF is a conflict."""
    response = client.post(
        "/api/auth/register", json={"cpf": test_user.cpf, "password": "another1"}
    )
    assert response.status_code == status.HTTP_409_CONFLICT


def test_register_short_password(client) -> None:
    response = client.post("/api/auth/register", json={"cpf": "52998224725", "password": "abc"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_register_invalid_cpf(client) -> None:
    """Malformed bodies are reported as 400, not 422."""
    for cpf in ("123", "11111111111"):
        response = client.post("/api/auth/register", json={"cpf": cpf, "password": "hunter22"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_login_wrong_password(client, test_user) -> None:
    response = client.post("/api/auth/login", json={"cpf": test_user.cpf, "password": "wrong-pass"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_login_unknown_cpf(client) -> None:
    response = client.post(
        "/api/auth/login", json={"cpf": "11144477735", "password": "secret123"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_missing_token_is_unauthorized(client) -> None:
    response = client.get("/api/users/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_garbage_token_is_forbidden(client) -> None:
    response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_expired_token_is_forbidden(client, test_user) -> None:
    """Tokens past their expiry are rejected like any other invalid token."""
    token = jwt.encode(
        {"sub": test_user.id, "exp": utcnow() - timedelta(minutes=1)},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_token_for_unknown_user_is_forbidden(client) -> None:
    token = create_access_token("0" * 32)
    response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_403_FORBIDDEN
