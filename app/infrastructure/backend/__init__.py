"""Backend store client handles."""

from .client import (
    NOTIFICATIONS_TABLE,
    AuthAdmin,
    BackendClient,
    BackendClients,
    NotificationTable,
    create_backend_clients,
)
from .errors import BackendAuthorizationError, BackendError, BackendUnavailableError

__all__ = [
    "AuthAdmin",
    "BackendAuthorizationError",
    "BackendClient",
    "BackendClients",
    "BackendError",
    "BackendUnavailableError",
    "NOTIFICATIONS_TABLE",
    "NotificationTable",
    "create_backend_clients",
]
