"""Domain entity representing a user of the auth directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

ROLE_ADMIN = "admin"
ROLE_VENDOR = "vendor"
ROLE_CUSTOMER = "customer"

USER_STATUS_SUSPENDED = "suspended"


@dataclass
class AuthUser:
    """Registered account together with its free-form metadata bag."""

    id: str | None
    email: str
    password_hash: str | None = None
    user_metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None

    @property
    def role(self) -> str | None:
        value = self.user_metadata.get("role")
        return value if isinstance(value, str) else None

    @property
    def status(self) -> str | None:
        value = self.user_metadata.get("status")
        return value if isinstance(value, str) else None

    @property
    def display_name(self) -> str:
        for key in ("full_name", "name"):
            value = self.user_metadata.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return self.email

    def has_role(self, role: str) -> bool:
        """Return ``True`` when the metadata role matches ``role`` exactly."""

        return self.role == role

    def is_suspended(self) -> bool:
        return self.status == USER_STATUS_SUSPENDED


__all__ = [
    "AuthUser",
    "ROLE_ADMIN",
    "ROLE_CUSTOMER",
    "ROLE_VENDOR",
    "USER_STATUS_SUSPENDED",
]
