"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class NotificationType(str, Enum):
    """Closed set of categories a notification can belong to."""

    ORDER = "order"
    PAYMENT = "payment"
    STOCK = "stock"
    SYSTEM = "system"
    STATUS_UPDATE = "status_update"
    NEW_SIGNUP = "new_signup"


def coerce_notification_type(value: NotificationType | str | None) -> NotificationType:
    """Return ``value`` as a :class:`NotificationType`, defaulting to ``system``.

    Raises ``ValueError`` for tags outside the closed set.
    """

    if value is None:
        return NotificationType.SYSTEM
    if isinstance(value, NotificationType):
        return value
    try:
        return NotificationType(str(value).strip().lower())
    except ValueError as exc:
        raise ValueError(f"Unknown notification type: {value!r}") from exc


@dataclass
class Notification:
    """Message delivered to a single user of the dashboard."""

    id: str | None
    user_id: str
    title: str
    message: str
    type: str = NotificationType.SYSTEM.value
    read: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    dispatch_id: str | None = None

    @property
    def known_type(self) -> NotificationType | None:
        """Return the typed category, or ``None`` for tags this system never writes."""

        try:
            return NotificationType(self.type)
        except ValueError:
            return None


__all__ = [
    "Notification",
    "NotificationType",
    "coerce_notification_type",
]
