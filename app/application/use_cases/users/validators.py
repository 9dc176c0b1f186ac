"""Input validation shared by the user use cases."""

import re

from app.domain.entities import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_VENDOR

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_ROLES = {ROLE_ADMIN, ROLE_VENDOR, ROLE_CUSTOMER}
MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str) -> str:
    normalized = (email or "").strip().lower()
    if not _EMAIL_PATTERN.match(normalized):
        raise ValueError("Invalid email address")
    return normalized


def validate_password(password: str) -> None:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def normalize_role(role: str | None) -> str:
    normalized = (role or ROLE_CUSTOMER).strip().lower()
    if normalized not in _ROLES:
        raise ValueError(f"Unknown role: {role}")
    return normalized
