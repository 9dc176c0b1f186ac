"""Typed outcomes returned by the notification use cases."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from app.domain.entities import Notification


class DispatchStatus(Enum):
    """Possible outcomes of a dispatch call."""

    DELIVERED = auto()
    NO_RECIPIENTS = auto()
    UNAVAILABLE = auto()
    FAILED = auto()


@dataclass(frozen=True)
class DispatchResult:
    """Notifications written by one dispatch call, or why none were."""

    status: DispatchStatus
    notifications: tuple[Notification, ...] = ()
    error: str | None = None
    dispatch_id: str | None = None

    @classmethod
    def delivered(
        cls, notifications: list[Notification], *, dispatch_id: str | None = None
    ) -> "DispatchResult":
        return cls(DispatchStatus.DELIVERED, tuple(notifications), dispatch_id=dispatch_id)

    @classmethod
    def no_recipients(cls) -> "DispatchResult":
        return cls(DispatchStatus.NO_RECIPIENTS)

    @classmethod
    def unavailable(cls, reason: str) -> "DispatchResult":
        return cls(DispatchStatus.UNAVAILABLE, error=reason)

    @classmethod
    def failed(cls, error: str, *, dispatch_id: str | None = None) -> "DispatchResult":
        return cls(DispatchStatus.FAILED, error=error, dispatch_id=dispatch_id)

    @property
    def ok(self) -> bool:
        return self.status is DispatchStatus.DELIVERED

    @property
    def notification(self) -> Notification | None:
        """First written notification, convenient for single-user sends."""

        return self.notifications[0] if self.notifications else None

    @property
    def recipient_ids(self) -> list[str]:
        return [notification.user_id for notification in self.notifications]

    def __len__(self) -> int:
        return len(self.notifications)


class ReadStatus(Enum):
    """Possible outcomes when flipping read flags."""

    UPDATED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class ReadResult:
    """Outcome of a read-tracking call; truthy on success."""

    status: ReadStatus
    updated_ids: tuple[str, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ReadStatus.UPDATED

    @property
    def updated_count(self) -> int:
        return len(self.updated_ids)

    def __bool__(self) -> bool:
        return self.ok


__all__ = ["DispatchResult", "DispatchStatus", "ReadResult", "ReadStatus"]
