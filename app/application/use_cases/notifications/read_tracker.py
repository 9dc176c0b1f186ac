"""Flip read flags and answer the header bell's queries."""

from __future__ import annotations

import logging

from app.domain.entities import Notification
from app.infrastructure.backend import BackendClient, BackendError

from .results import ReadResult, ReadStatus

logger = logging.getLogger(__name__)


class NotificationReadTracker:
    """Mark notifications read, one at a time or in bulk per user.

    Both operations only ever set ``read`` to true, so repeating them is
    harmless.
    """

    def __init__(self, client: BackendClient) -> None:
        self._client = client

    def mark_read(self, notification_id: str, *, user_id: str | None = None) -> ReadResult:
        """Mark one notification read, optionally only if ``user_id`` owns it."""

        try:
            changed = self._client.notifications.mark_read(notification_id, user_id=user_id)
        except BackendError as exc:
            logger.error("Error marking notification %s as read: %s", notification_id, exc)
            return ReadResult(ReadStatus.FAILED, error=str(exc))
        return ReadResult(ReadStatus.UPDATED, tuple(item.id for item in changed if item.id))

    def mark_many_read(self, notification_ids: list[str], *, user_id: str) -> ReadResult:
        """Mark each of ``notification_ids`` owned by ``user_id`` read."""

        updated: list[str] = []
        for notification_id in dict.fromkeys(notification_ids):
            result = self.mark_read(notification_id, user_id=user_id)
            if not result:
                return ReadResult(ReadStatus.FAILED, tuple(updated), error=result.error)
            updated.extend(result.updated_ids)
        return ReadResult(ReadStatus.UPDATED, tuple(updated))

    def mark_all_read(self, user_id: str) -> ReadResult:
        """Mark every unread notification owned by ``user_id`` read."""

        try:
            changed = self._client.notifications.mark_all_read(user_id)
        except BackendError as exc:
            logger.error("Error marking all notifications as read for %s: %s", user_id, exc)
            return ReadResult(ReadStatus.FAILED, error=str(exc))
        return ReadResult(ReadStatus.UPDATED, tuple(item.id for item in changed if item.id))

    def list_recent(self, user_id: str, *, limit: int = 10) -> list[Notification]:
        """Return the newest notifications for ``user_id``. Raises ``BackendError``."""

        return self._client.notifications.select(user_id=user_id, limit=limit)

    def unread_count(self, user_id: str) -> int:
        """Return how many notifications ``user_id`` has not read. Raises ``BackendError``."""

        return self._client.notifications.count(user_id=user_id, read=False)


__all__ = ["NotificationReadTracker"]
