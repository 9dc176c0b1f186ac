"""Realtime change feed and delivery helpers for the infrastructure layer."""

from .delivery import WebSocketSender
from .feed import (
    EVENT_ANY,
    EVENT_INSERT,
    EVENT_UPDATE,
    ChangeEvent,
    ChangeFeed,
    Channel,
    RowFilter,
    parse_filter,
)
from .payloads import notification_from_payload, serialize_notification

__all__ = [
    "EVENT_ANY",
    "EVENT_INSERT",
    "EVENT_UPDATE",
    "ChangeEvent",
    "ChangeFeed",
    "Channel",
    "RowFilter",
    "WebSocketSender",
    "notification_from_payload",
    "parse_filter",
    "serialize_notification",
]
