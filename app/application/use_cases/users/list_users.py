"""Use case for listing users of the directory."""

from collections.abc import Sequence

from app.domain.entities import AuthUser
from app.infrastructure.backend import BackendClient


def list_users(
    client: BackendClient,
    *,
    role: str | None = None,
    status: str | None = None,
    page_size: int = 1000,
) -> Sequence[AuthUser]:
    """Return every user, optionally narrowed to a metadata role and status.

    Requires the privileged client; raises ``BackendError`` otherwise.
    """

    users = []
    for user in client.auth.iter_users(per_page=page_size):
        if role is not None and user.role != role:
            continue
        if status is not None and user.status != status:
            continue
        users.append(user)
    return users
