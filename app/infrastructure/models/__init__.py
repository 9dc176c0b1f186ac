"""ORM models used by the application infrastructure."""

from .auth_user import AuthUserModel
from .notification import NotificationDispatchModel, NotificationModel

__all__ = [
    "AuthUserModel",
    "NotificationDispatchModel",
    "NotificationModel",
]
