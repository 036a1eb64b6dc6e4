"""Practitioner session tokens."""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from clinicdesk.config import settings


def create_access_token(
    doctor_id: UUID,
    expires_delta: timedelta | None = None,
    **claims: Any,
) -> str:
    """
    Create a JWT access token for a practitioner.

    Args:
        doctor_id: Practitioner ID stored as the ``sub`` claim
        expires_delta: Optional expiration time delta
        **claims: Extra claims to encode

    Returns:
        Encoded JWT token
    """
    to_encode = {"sub": str(doctor_id), **claims}

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update(
        {
            "exp": expire,
            "iat": datetime.now(UTC),
            "type": "access",
        }
    )

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token to decode

    Returns:
        Decoded payload or None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None

    # Verify token type
    if payload.get("type") != "access":
        return None

    return payload


def current_doctor_id(token: str | None) -> UUID | None:
    """Practitioner ID carried by a session token, or None without a valid session."""
    if not token:
        return None

    payload = decode_access_token(token)
    if payload is None:
        return None

    subject = payload.get("sub")
    if not isinstance(subject, str):
        return None

    try:
        return UUID(subject)
    except ValueError:
        return None
