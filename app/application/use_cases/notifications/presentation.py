"""Display helpers for the header bell."""

from __future__ import annotations

from datetime import datetime

from app.domain.entities import Notification, NotificationType
from app.utils import utc_now

_HEADINGS = {
    NotificationType.ORDER: "New Order",
    NotificationType.PAYMENT: "Payment Received",
    NotificationType.STOCK: "Stock Alert",
    NotificationType.SYSTEM: "System Notification",
}
_DEFAULT_HEADING = "Notification"
_DEFAULT_LINK = "/dashboard/notifications"


def notification_heading(notification_type: str | None) -> str:
    """Return the heading shown above a notification of ``notification_type``."""

    try:
        return _HEADINGS.get(NotificationType(notification_type), _DEFAULT_HEADING)
    except ValueError:
        return _DEFAULT_HEADING


def notification_link(notification: Notification) -> str:
    """Return the dashboard path a notification points to."""

    metadata = notification.metadata or {}
    kind = notification.known_type
    if kind is NotificationType.ORDER:
        return f"/dashboard/orders/{metadata.get('order_id') or ''}"
    if kind is NotificationType.PAYMENT:
        return f"/dashboard/payments/{metadata.get('payment_id') or ''}"
    if kind is NotificationType.STOCK:
        return f"/dashboard/products/{metadata.get('product_id') or ''}"
    return _DEFAULT_LINK


def format_time_ago(moment: datetime | None, *, now: datetime | None = None) -> str:
    """Describe how long ago ``moment`` was ("5 minutes ago")."""

    if moment is None:
        return ""
    reference = now or utc_now()
    seconds = max(0, int((reference - moment).total_seconds()))
    if seconds < 60:
        return f"{seconds} seconds ago"
    if seconds < 3600:
        return f"{seconds // 60} minutes ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    return f"{seconds // 86400} days ago"


__all__ = ["format_time_ago", "notification_heading", "notification_link"]
