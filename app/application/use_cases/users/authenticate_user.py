"""Use case for authenticating a user."""

from enum import Enum, auto

from app.domain.entities import AuthUser
from app.infrastructure.backend import BackendClient
from app.infrastructure.security import verify_password


class AuthenticationStatus(Enum):
    """Possible outcomes when attempting to authenticate a user."""

    SUCCESS = auto()
    INVALID_CREDENTIALS = auto()
    SUSPENDED = auto()


def authenticate_user(
    client: BackendClient, email: str, password: str
) -> tuple[AuthUser | None, AuthenticationStatus]:
    """Return the authentication result along with the user when possible."""

    user = client.auth.get_user_by_email(email)

    if not user:
        return None, AuthenticationStatus.INVALID_CREDENTIALS

    if not verify_password(password, user.password_hash):
        return None, AuthenticationStatus.INVALID_CREDENTIALS

    if user.is_suspended():
        return user, AuthenticationStatus.SUSPENDED

    return user, AuthenticationStatus.SUCCESS
