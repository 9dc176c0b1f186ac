"""Public helpers for dispatching, tracking and streaming notifications."""

from .bridge import RealtimeNotificationBridge
from .composers import (
    format_amount,
    send_low_stock_notification,
    send_new_order_notification,
    send_new_user_notification,
    send_order_status_notification,
)
from .dispatcher import NotificationDispatcher, build_notification, new_dispatch_id
from .presentation import format_time_ago, notification_heading, notification_link
from .read_tracker import NotificationReadTracker
from .results import DispatchResult, DispatchStatus, ReadResult, ReadStatus

__all__ = [
    "DispatchResult",
    "DispatchStatus",
    "NotificationDispatcher",
    "NotificationReadTracker",
    "ReadResult",
    "ReadStatus",
    "RealtimeNotificationBridge",
    "build_notification",
    "format_amount",
    "format_time_ago",
    "new_dispatch_id",
    "notification_heading",
    "notification_link",
    "send_low_stock_notification",
    "send_new_order_notification",
    "send_new_user_notification",
    "send_order_status_notification",
]
