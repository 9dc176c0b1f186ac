"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.domain.entities import Notification
from app.infrastructure.models import NotificationDispatchModel, NotificationModel
from app.utils import from_storage_datetime, to_storage_datetime, utc_now


class NotificationRepository:
    """Provide insert, query and read-flag updates for :class:`Notification`."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def insert_many(self, notifications: Sequence[Notification]) -> list[Notification]:
        """Persist ``notifications`` in a single transaction.

        Each distinct ``dispatch_id`` is claimed in the same transaction, so a
        second batch for an already claimed id fails with ``IntegrityError``.
        """

        now = to_storage_datetime(utc_now())
        claims: dict[str, int] = {}
        for notification in notifications:
            if notification.dispatch_id:
                claims[notification.dispatch_id] = claims.get(notification.dispatch_id, 0) + 1
        self.session.add_all(
            NotificationDispatchModel(id=dispatch_id, row_count=count, created_at=now)
            for dispatch_id, count in claims.items()
        )
        models = []
        for notification in notifications:
            model = NotificationModel()
            model.user_id = notification.user_id
            model.title = notification.title
            model.message = notification.message
            model.type = notification.type
            model.read = False
            model.metadata_ = dict(notification.metadata or {})
            model.dispatch_id = notification.dispatch_id
            model.created_at = now
            model.updated_at = now
            models.append(model)
        self.session.add_all(models)
        self.session.commit()
        return [self._to_entity(model) for model in models]

    def get(self, notification_id: str) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def list_for_user(
        self,
        user_id: str,
        *,
        read: bool | None = None,
        created_after: datetime | None = None,
        limit: int | None = 10,
    ) -> Sequence[Notification]:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )
        if read is not None:
            query = query.filter(NotificationModel.read.is_(read))
        if created_after is not None:
            # Inclusive so rows sharing the cursor timestamp are not lost.
            query = query.filter(
                NotificationModel.created_at >= to_storage_datetime(created_after)
            )
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_by_dispatch(self, dispatch_id: str) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.dispatch_id == dispatch_id)
            .order_by(NotificationModel.created_at.asc(), NotificationModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def count_for_user(self, user_id: str, *, read: bool | None = None) -> int:
        query = self.session.query(func.count(NotificationModel.id)).filter(
            NotificationModel.user_id == user_id
        )
        if read is not None:
            query = query.filter(NotificationModel.read.is_(read))
        return int(query.scalar() or 0)

    def mark_read(
        self, notification_id: str, *, user_id: str | None = None
    ) -> list[Notification]:
        """Set ``read`` on one notification and return it when it changed."""

        query = self.session.query(NotificationModel).filter(
            NotificationModel.id == notification_id,
            NotificationModel.read.is_(False),
        )
        if user_id is not None:
            query = query.filter(NotificationModel.user_id == user_id)
        return self._set_read(query.all())

    def mark_all_read(self, user_id: str) -> list[Notification]:
        """Set ``read`` on every unread notification owned by ``user_id``."""

        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id,
            NotificationModel.read.is_(False),
        )
        return self._set_read(query.all())

    def _set_read(self, models: list[NotificationModel]) -> list[Notification]:
        if not models:
            return []
        now = to_storage_datetime(utc_now())
        for model in models:
            model.read = True
            model.updated_at = now
        self.session.commit()
        return [self._to_entity(model) for model in models]

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            message=model.message,
            type=model.type,
            read=bool(model.read),
            metadata=dict(model.metadata_ or {}),
            created_at=from_storage_datetime(model.created_at),
            updated_at=from_storage_datetime(model.updated_at),
            dispatch_id=model.dispatch_id,
        )


__all__ = ["NotificationRepository"]
