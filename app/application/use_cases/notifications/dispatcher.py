"""Compose notification records and write them for users, roles or everyone."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Sequence
from typing import Any

from app.domain.entities import Notification, NotificationType, coerce_notification_type
from app.infrastructure.backend import BackendClient, BackendError

from .results import DispatchResult

logger = logging.getLogger(__name__)

_UNAVAILABLE_REASON = "Admin client not configured"


def new_dispatch_id() -> str:
    """Return a fresh operation id shared by the rows of one dispatch."""

    return uuid.uuid4().hex


def unique_ids(user_ids: Iterable[str | None]) -> list[str]:
    """Return non-empty ids without duplicates, preserving order."""

    unique: list[str] = []
    seen: set[str] = set()
    for user_id in user_ids:
        if not user_id or user_id in seen:
            continue
        seen.add(user_id)
        unique.append(user_id)
    return unique


def build_notification(
    user_id: str,
    title: str,
    message: str,
    type: NotificationType | str | None = None,
    metadata: dict[str, Any] | None = None,
) -> Notification:
    """Return an unsaved notification; raises ``ValueError`` for bad input."""

    if not user_id:
        raise ValueError("A target user id is required")
    if not title or not title.strip():
        raise ValueError("A notification title is required")
    if not message or not message.strip():
        raise ValueError("A notification message is required")
    return Notification(
        id=None,
        user_id=user_id,
        title=title,
        message=message,
        type=coerce_notification_type(type).value,
        read=False,
        metadata=dict(metadata or {}),
    )


class NotificationDispatcher:
    """Write notifications through the privileged store client.

    Every call returns a :class:`DispatchResult`; store failures are logged and
    reported as ``FAILED``, a missing privileged client as ``UNAVAILABLE`` and
    an empty audience as ``NO_RECIPIENTS``.
    """

    def __init__(self, client: BackendClient | None, *, page_size: int = 1000) -> None:
        if client is not None and not client.privileged:
            raise ValueError("NotificationDispatcher requires the privileged client")
        self._client = client
        self._page_size = page_size

    @property
    def available(self) -> bool:
        return self._client is not None

    def send_to_user(
        self,
        target_user_id: str,
        title: str,
        message: str,
        type: NotificationType | str | None = None,
        metadata: dict[str, Any] | None = None,
        *,
        dispatch_id: str | None = None,
    ) -> DispatchResult:
        """Write one notification for ``target_user_id``."""

        try:
            record = build_notification(target_user_id, title, message, type, metadata)
        except ValueError as exc:
            logger.warning("Rejected notification for %s: %s", target_user_id, exc)
            return DispatchResult.failed(str(exc))
        return self.send_batch([record], dispatch_id=dispatch_id)

    def send_to_users(
        self,
        user_ids: Iterable[str],
        title: str,
        message: str,
        type: NotificationType | str | None = None,
        metadata: dict[str, Any] | None = None,
        *,
        dispatch_id: str | None = None,
    ) -> DispatchResult:
        """Write the same notification for each id in one batched insert."""

        targets = unique_ids(user_ids)
        if not targets:
            return DispatchResult.no_recipients()
        try:
            records = [
                build_notification(user_id, title, message, type, metadata)
                for user_id in targets
            ]
        except ValueError as exc:
            logger.warning("Rejected notification batch: %s", exc)
            return DispatchResult.failed(str(exc))
        return self.send_batch(records, dispatch_id=dispatch_id)

    def send_to_role(
        self,
        role: str,
        title: str,
        message: str,
        type: NotificationType | str | None = None,
        metadata: dict[str, Any] | None = None,
        *,
        dispatch_id: str | None = None,
    ) -> DispatchResult:
        """Write the notification for every user whose metadata role is ``role``."""

        if self._client is None:
            logger.error("Cannot notify role %s: %s", role, _UNAVAILABLE_REASON)
            return DispatchResult.unavailable(_UNAVAILABLE_REASON)
        try:
            recipients = self.role_recipients(role)
        except BackendError as exc:
            logger.error("Error fetching users for role %s: %s", role, exc)
            return DispatchResult.failed(str(exc))
        if not recipients:
            logger.info("No users found with role: %s", role)
            return DispatchResult.no_recipients()
        return self.send_to_users(
            recipients, title, message, type, metadata, dispatch_id=dispatch_id
        )

    def send_to_all(
        self,
        title: str,
        message: str,
        type: NotificationType | str | None = None,
        metadata: dict[str, Any] | None = None,
        *,
        dispatch_id: str | None = None,
    ) -> DispatchResult:
        """Write the notification for every registered user."""

        if self._client is None:
            logger.error("Cannot broadcast notification: %s", _UNAVAILABLE_REASON)
            return DispatchResult.unavailable(_UNAVAILABLE_REASON)
        try:
            recipients = [
                user.id
                for user in self._client.auth.iter_users(per_page=self._page_size)
                if user.id
            ]
        except BackendError as exc:
            logger.error("Error fetching users for broadcast: %s", exc)
            return DispatchResult.failed(str(exc))
        return self.send_to_users(
            recipients, title, message, type, metadata, dispatch_id=dispatch_id
        )

    def role_recipients(self, role: str) -> list[str]:
        """Return the ids of users whose metadata role equals ``role``.

        The directory is walked one page at a time. Raises ``BackendError``.
        """

        if self._client is None:
            raise BackendError(_UNAVAILABLE_REASON)
        return unique_ids(
            user.id
            for user in self._client.auth.iter_users(per_page=self._page_size)
            if user.has_role(role)
        )

    def send_batch(
        self, records: Sequence[Notification], *, dispatch_id: str | None = None
    ) -> DispatchResult:
        """Write ``records`` in one insert keyed by ``dispatch_id``.

        When rows for ``dispatch_id`` already exist they are returned instead of
        being written a second time.
        """

        if self._client is None:
            logger.error("Cannot send notifications: %s", _UNAVAILABLE_REASON)
            return DispatchResult.unavailable(_UNAVAILABLE_REASON)
        if not records:
            return DispatchResult.no_recipients()

        operation_id = dispatch_id or new_dispatch_id()
        try:
            if dispatch_id is not None:
                existing = self._client.notifications.select_by_dispatch(dispatch_id)
                if existing:
                    logger.info(
                        "Dispatch %s already delivered %d notification(s); skipping",
                        dispatch_id,
                        len(existing),
                    )
                    return DispatchResult.delivered(existing, dispatch_id=dispatch_id)
            for record in records:
                record.dispatch_id = operation_id
            saved = self._client.notifications.insert(records)
        except BackendError as exc:
            logger.error("Error creating notifications (dispatch %s): %s", operation_id, exc)
            return DispatchResult.failed(str(exc), dispatch_id=operation_id)

        logger.debug("Dispatch %s wrote %d notification(s)", operation_id, len(saved))
        return DispatchResult.delivered(saved, dispatch_id=operation_id)


__all__ = [
    "NotificationDispatcher",
    "build_notification",
    "new_dispatch_id",
    "unique_ids",
]
