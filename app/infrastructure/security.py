"""Security helpers for password hashing, session tokens and API keys."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import get_settings

_ALGORITHM = "HS256"

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__rounds=310_000,
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    user_id: str, *, role: str | None = None, expires_delta: timedelta | None = None
) -> str:
    """Return a signed session token whose subject is ``user_id``."""

    settings = get_settings()
    expire = datetime.now(tz=timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": user_id, "role": role or "authenticated", "exp": expire}
    return jwt.encode(claims, settings.jwt_secret, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[_ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def keys_match(provided: str | None, expected: str | None) -> bool:
    """Compare API keys in constant time; missing values never match."""

    if not provided or not expected:
        return False
    return secrets.compare_digest(provided.encode(), expected.encode())


__all__ = [
    "create_access_token",
    "decode_access_token",
    "get_password_hash",
    "keys_match",
    "verify_password",
]
