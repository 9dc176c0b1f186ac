"""Use case for signing up a new account."""

import logging

from app.application.use_cases.notifications import (
    NotificationDispatcher,
    send_new_user_notification,
)
from app.domain.entities import ROLE_CUSTOMER, AuthUser
from app.infrastructure.backend import BackendClient
from app.infrastructure.security import get_password_hash

from .validators import normalize_email, normalize_role, validate_password

logger = logging.getLogger(__name__)


def register_user(
    client: BackendClient,
    dispatcher: NotificationDispatcher,
    *,
    email: str,
    password: str,
    name: str | None = None,
    role: str = ROLE_CUSTOMER,
) -> AuthUser:
    """Create the account and tell the admins about it.

    Raises ``ValueError`` for invalid input or an email that is already taken.
    The admin notification is best effort and never undoes the signup.
    """

    normalized_email = normalize_email(email)
    validate_password(password)
    metadata = {"role": normalize_role(role)}
    if name and name.strip():
        metadata["name"] = name.strip()
        metadata["full_name"] = name.strip()

    user = client.auth.create_user(
        email=normalized_email,
        password_hash=get_password_hash(password),
        user_metadata=metadata,
    )

    result = send_new_user_notification(
        dispatcher,
        user_id=user.id or "",
        email=user.email,
        full_name=metadata.get("full_name"),
        role=user.role,
    )
    if not result.ok:
        logger.warning(
            "Signup notification for %s was not delivered: %s",
            user.email,
            result.error or result.status.name,
        )
    return user
