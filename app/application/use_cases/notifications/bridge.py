"""Live, per-session view of one user's recent notifications."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from datetime import datetime
from typing import Callable

from app.domain.entities import Notification
from app.infrastructure.backend import NOTIFICATIONS_TABLE, BackendClient
from app.infrastructure.realtime import EVENT_INSERT, ChangeEvent, Channel, notification_from_payload

from .read_tracker import NotificationReadTracker
from .results import ReadResult

logger = logging.getLogger(__name__)

NotificationListener = Callable[[Notification, int], None]
ToastListener = Callable[[Notification], None]


def _sort_key(notification: Notification) -> tuple[float, str]:
    created = notification.created_at.timestamp() if notification.created_at else 0.0
    return (created, notification.id or "")


class RealtimeNotificationBridge:
    """Keep a user's notification list and unread counter current.

    ``start`` subscribes to INSERT events filtered by the user id before it
    loads the most recent rows, so nothing inserted in between is missed. Rows
    are de-duplicated by id and the newest ``created_at`` seen acts as the
    cursor for :meth:`resync`. There is no automatic reconnect.
    """

    def __init__(
        self,
        client: BackendClient,
        user_id: str,
        *,
        limit: int = 10,
        on_notification: NotificationListener | None = None,
        on_toast: ToastListener | None = None,
        tracker: NotificationReadTracker | None = None,
    ) -> None:
        self._client = client
        self._user_id = user_id
        self._limit = limit
        self._on_notification = on_notification
        self._on_toast = on_toast
        self._tracker = tracker or NotificationReadTracker(client)
        self._lock = threading.RLock()
        self._items: list[Notification] = []
        self._ids: set[str] = set()
        self._unread = 0
        self._cursor: datetime | None = None
        self._channel: Channel | None = None

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def notifications(self) -> list[Notification]:
        """Local state, most recent first."""

        with self._lock:
            return list(self._items)

    @property
    def unread_count(self) -> int:
        with self._lock:
            return self._unread

    @property
    def cursor(self) -> datetime | None:
        with self._lock:
            return self._cursor

    @property
    def is_subscribed(self) -> bool:
        return self._channel is not None and self._channel.is_subscribed

    def start(self) -> list[Notification]:
        """Subscribe and load the initial rows; returns the local list.

        Raises ``BackendError`` when the initial fetch fails, after closing the
        subscription again.
        """

        if self._channel is not None:
            return self.notifications
        channel = self._client.realtime.channel(f"notifications:{self._user_id}")
        channel.on(
            EVENT_INSERT,
            table=NOTIFICATIONS_TABLE,
            filter=f"user_id=eq.{self._user_id}",
            callback=self.handle_insert,
        )
        self._channel = channel.subscribe()
        try:
            initial = self._client.notifications.select(user_id=self._user_id, limit=self._limit)
        except Exception:
            self.stop()
            raise
        self._merge(initial)
        return self.notifications

    def stop(self) -> None:
        """Close the subscription; safe to call more than once."""

        channel, self._channel = self._channel, None
        if channel is not None:
            channel.unsubscribe()

    def resync(self) -> list[Notification]:
        """Fetch rows newer than the cursor and merge them; returns the additions.

        Without a cursor this reloads the most recent rows. Raises ``BackendError``.
        """

        cursor = self.cursor
        fetched = self._client.notifications.select(
            user_id=self._user_id, created_after=cursor, limit=None if cursor else self._limit
        )
        return self._merge(fetched)

    def handle_insert(self, event: ChangeEvent) -> None:
        """Apply an INSERT event: prepend, bump the unread counter, raise a toast."""

        notification = notification_from_payload(event.new)
        if notification.user_id != self._user_id:
            return
        with self._lock:
            if notification.id in self._ids:
                return
            self._items.insert(0, notification)
            if notification.id:
                self._ids.add(notification.id)
            self._unread += 1
            self._advance_cursor([notification])
            unread = self._unread
        if self._on_notification is not None:
            self._on_notification(notification, unread)
        if self._on_toast is not None:
            self._on_toast(notification)

    def mark_read(self, notification_id: str) -> ReadResult:
        """Mark one notification read in the store, then locally."""

        result = self._tracker.mark_read(notification_id, user_id=self._user_id)
        if result:
            self._apply_read({notification_id})
        return result

    def mark_many_read(self, notification_ids: Iterable[str]) -> ReadResult:
        ids = list(notification_ids)
        result = self._tracker.mark_many_read(ids, user_id=self._user_id)
        if result:
            self._apply_read(set(ids))
        return result

    def mark_all_read(self) -> ReadResult:
        """Mark everything read in the store, then reset local state."""

        result = self._tracker.mark_all_read(self._user_id)
        if result:
            with self._lock:
                self._apply_read({item.id for item in self._items if item.id})
        return result

    def _apply_read(self, ids: set[str]) -> None:
        with self._lock:
            for notification in self._items:
                if notification.id in ids and not notification.read:
                    notification.read = True
                    self._unread = max(0, self._unread - 1)

    def _merge(self, fetched: Iterable[Notification]) -> list[Notification]:
        with self._lock:
            added = []
            for notification in fetched:
                if notification.id and notification.id in self._ids:
                    continue
                added.append(notification)
                if notification.id:
                    self._ids.add(notification.id)
            if not added:
                return []
            self._items.extend(added)
            self._items.sort(key=_sort_key, reverse=True)
            self._unread += sum(1 for notification in added if not notification.read)
            self._advance_cursor(added)
            return added

    def _advance_cursor(self, notifications: Iterable[Notification]) -> None:
        for notification in notifications:
            created = notification.created_at
            if created is not None and (self._cursor is None or created > self._cursor):
                self._cursor = created


__all__ = ["NotificationListener", "RealtimeNotificationBridge", "ToastListener"]
