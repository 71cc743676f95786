"""Password hashing and bearer-token helpers."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from boardwatch.core.errors import UnauthenticatedError
from boardwatch.core.settings import settings
from boardwatch.db.time import utcnow

PBKDF2_ITERATIONS = 100_000


def hash_password(password: str) -> str:
    """Return a salted PBKDF2-SHA256 hash in ``salt:digest`` form."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        PBKDF2_ITERATIONS,
    ).hex()
    return f"{salt}:{digest}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Check ``password`` against a hash produced by :func:`hash_password`."""
    try:
        salt, expected = stored_hash.split(":", 1)
    except ValueError:
        return False
    computed = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        PBKDF2_ITERATIONS,
    ).hex()
    return hmac.compare_digest(computed, expected)


def create_access_token(subject: str, extra_claims: dict[str, Any] | None = None) -> str:
    """Create a JWT access token for ``subject``."""
    to_encode: dict[str, Any] = {"sub": subject}
    if extra_claims:
        to_encode.update(extra_claims)
    to_encode["exp"] = utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> str:
    """Return the subject of a valid token.

    Raises:
        UnauthenticatedError: With status 403 if the token is malformed, expired
            or carries no subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise UnauthenticatedError("Could not validate credentials", status_code=403) from err
    subject = payload.get("sub")
    if not subject:
        raise UnauthenticatedError("Could not validate credentials", status_code=403)
    return str(subject)
