"""Use cases for managing users."""

from .authenticate_user import AuthenticationStatus, authenticate_user
from .list_users import list_users
from .register_user import register_user

__all__ = [
    "AuthenticationStatus",
    "authenticate_user",
    "list_users",
    "register_user",
]
