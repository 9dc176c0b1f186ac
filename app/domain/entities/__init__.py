"""Domain entities exposed by the application."""

from .commerce_event import OrderEvent, StockEvent
from .notification import (
    Notification,
    NotificationType,
    coerce_notification_type,
)
from .user import (
    ROLE_ADMIN,
    ROLE_CUSTOMER,
    ROLE_VENDOR,
    USER_STATUS_SUSPENDED,
    AuthUser,
)

__all__ = [
    "AuthUser",
    "Notification",
    "NotificationType",
    "OrderEvent",
    "ROLE_ADMIN",
    "ROLE_CUSTOMER",
    "ROLE_VENDOR",
    "StockEvent",
    "USER_STATUS_SUSPENDED",
    "coerce_notification_type",
]
