"""Repository implementations for infrastructure layer."""

from .auth_user_repository import AuthUserRepository
from .notification_repository import NotificationRepository

__all__ = [
    "AuthUserRepository",
    "NotificationRepository",
]
