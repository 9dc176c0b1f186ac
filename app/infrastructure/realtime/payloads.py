"""JSON payload conversion for notifications travelling through the feed."""

from __future__ import annotations

from typing import Any

from app.domain.entities import Notification
from app.utils import parse_iso_datetime


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the JSON-serializable row representation of ``notification``."""

    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "title": notification.title,
        "message": notification.message,
        "type": notification.type,
        "read": notification.read,
        "metadata": dict(notification.metadata or {}),
        "dispatch_id": notification.dispatch_id,
        "created_at": notification.created_at.isoformat()
        if notification.created_at
        else None,
        "updated_at": notification.updated_at.isoformat()
        if notification.updated_at
        else None,
    }


def notification_from_payload(payload: dict[str, Any]) -> Notification:
    """Rebuild a :class:`Notification` from a row payload.

    Missing optional keys take their defaults; ``metadata`` that is not an
    object is treated as empty.
    """

    metadata = payload.get("metadata")
    return Notification(
        id=payload.get("id"),
        user_id=str(payload.get("user_id") or ""),
        title=str(payload.get("title") or ""),
        message=str(payload.get("message") or ""),
        type=str(payload.get("type") or "system"),
        read=bool(payload.get("read", False)),
        metadata=dict(metadata) if isinstance(metadata, dict) else {},
        created_at=parse_iso_datetime(payload.get("created_at")),
        updated_at=parse_iso_datetime(payload.get("updated_at")),
        dispatch_id=payload.get("dispatch_id"),
    )


__all__ = ["notification_from_payload", "serialize_notification"]
