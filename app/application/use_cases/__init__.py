"""Aggregate application use cases."""

from .users import authenticate_user, list_users, register_user

__all__ = [
    "authenticate_user",
    "list_users",
    "register_user",
]
