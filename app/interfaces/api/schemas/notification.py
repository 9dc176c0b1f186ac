"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.entities import NotificationType


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str
    user_id: str
    title: str
    message: str
    type: str
    read: bool
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    heading: str
    link: str
    time_ago: str = ""


class NotificationSendRequest(BaseModel):
    """Payload used to notify a single user."""

    target_user_id: str = Field(..., min_length=1, alias="targetUserId")
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.SYSTEM
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


class RoleNotificationRequest(BaseModel):
    """Payload used to notify every user holding a role."""

    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.SYSTEM
    metadata: dict[str, Any] = Field(default_factory=dict)


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    ids: list[str] = Field(..., min_length=1, description="Notification identifiers")


class OrderEventRequest(BaseModel):
    order_id: str = Field(..., min_length=1)
    order_number: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    status: str = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0)
    vendor_id: str | None = None
    old_status: str | None = None
    dispatch_id: str | None = Field(default=None, max_length=64)


class StockEventRequest(BaseModel):
    product_id: str = Field(..., min_length=1)
    product_name: str = Field(..., min_length=1)
    current_stock: int = Field(..., ge=0)
    threshold: int = Field(..., ge=0)
    vendor_id: str = Field(..., min_length=1)
    dispatch_id: str | None = Field(default=None, max_length=64)


class SignupEventRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    full_name: str | None = None
    role: str | None = None
    dispatch_id: str | None = Field(default=None, max_length=64)


class DispatchResponse(BaseModel):
    """Outcome of a dispatch endpoint."""

    success: bool
    status: str
    count: int
    dispatch_id: str | None = None
    notifications: list[NotificationRead] = Field(default_factory=list)


class SingleDispatchResponse(BaseModel):
    success: bool
    notification: NotificationRead


class UnreadCountResponse(BaseModel):
    count: int


class ReadResponse(BaseModel):
    ok: bool
    updated: int


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
    "UnreadCountResponse",
]
