from .auth import Token
from .notification import (
    DispatchResponse,
    NotificationMarkReadRequest,
    NotificationRead,
    NotificationSendRequest,
    OrderEventRequest,
    ReadResponse,
    RoleNotificationRequest,
    SignupEventRequest,
    SingleDispatchResponse,
    StockEventRequest,
    UnreadCountResponse,
)
from .user import UserRead, UserSignup

__all__ = [
    "DispatchResponse",
    "NotificationMarkReadRequest",
    "NotificationRead",
    "NotificationSendRequest",
    "OrderEventRequest",
    "ReadResponse",
    "RoleNotificationRequest",
    "SignupEventRequest",
    "SingleDispatchResponse",
    "StockEventRequest",
    "Token",
    "UnreadCountResponse",
    "UserRead",
    "UserSignup",
]
