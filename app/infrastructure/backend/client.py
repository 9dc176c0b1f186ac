"""Client handles over the backend store.

Two handles share one engine and one change feed: the public handle, built from
the anonymous key, and the privileged handle, built only when a service role
key is configured. Privileged operations (writing notifications for other
users, listing the user directory) raise :class:`BackendAuthorizationError` on
the public handle.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.config import Settings
from app.domain.entities import AuthUser, Notification
from app.infrastructure.database import (
    create_database_engine,
    create_session_factory,
    initialize_database,
)
from app.infrastructure.realtime import EVENT_INSERT, EVENT_UPDATE, ChangeFeed, serialize_notification
from app.infrastructure.repositories import AuthUserRepository, NotificationRepository

from .errors import BackendAuthorizationError, BackendError, BackendUnavailableError

logger = logging.getLogger(__name__)

NOTIFICATIONS_TABLE = "notifications"


@contextmanager
def _store_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Yield a session and translate SQLAlchemy failures into backend errors."""

    session = session_factory()
    try:
        yield session
    except OperationalError as exc:
        session.rollback()
        raise BackendUnavailableError(str(exc.orig or exc)) from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise BackendError(str(exc)) from exc
    finally:
        session.close()


class NotificationTable:
    """Insert, query and update access to the ``notifications`` table."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        feed: ChangeFeed,
        *,
        privileged: bool,
    ) -> None:
        self._session_factory = session_factory
        self._feed = feed
        self._privileged = privileged

    def insert(self, records: Sequence[Notification]) -> list[Notification]:
        """Persist ``records`` atomically and publish one INSERT per row.

        When another writer already committed the batch's ``dispatch_id`` the
        rows stored under it are returned and nothing is published.
        """

        if not self._privileged:
            raise BackendAuthorizationError("Writing notifications requires the service role")
        if not records:
            return []
        try:
            with _store_session(self._session_factory) as session:
                saved = NotificationRepository(session).insert_many(records)
        except BackendError as exc:
            dispatch_ids = {record.dispatch_id for record in records}
            if not isinstance(exc.__cause__, IntegrityError) or len(dispatch_ids) != 1:
                raise
            (dispatch_id,) = dispatch_ids
            if dispatch_id is None:
                raise
            logger.info(
                "Dispatch %s was claimed by another writer; returning its rows", dispatch_id
            )
            return self.select_by_dispatch(dispatch_id)
        for notification in saved:
            self._feed.publish(
                NOTIFICATIONS_TABLE, EVENT_INSERT, new=serialize_notification(notification)
            )
        return saved

    def select(
        self,
        *,
        user_id: str,
        read: bool | None = None,
        created_after: datetime | None = None,
        limit: int | None = 10,
    ) -> list[Notification]:
        with _store_session(self._session_factory) as session:
            return list(
                NotificationRepository(session).list_for_user(
                    user_id, read=read, created_after=created_after, limit=limit
                )
            )

    def select_by_dispatch(self, dispatch_id: str) -> list[Notification]:
        with _store_session(self._session_factory) as session:
            return list(NotificationRepository(session).list_by_dispatch(dispatch_id))

    def get(self, notification_id: str) -> Notification | None:
        with _store_session(self._session_factory) as session:
            return NotificationRepository(session).get(notification_id)

    def count(self, *, user_id: str, read: bool | None = None) -> int:
        with _store_session(self._session_factory) as session:
            return NotificationRepository(session).count_for_user(user_id, read=read)

    def mark_read(self, notification_id: str, *, user_id: str | None = None) -> list[Notification]:
        """Set ``read`` on one row; returns the rows that actually changed."""

        with _store_session(self._session_factory) as session:
            changed = NotificationRepository(session).mark_read(
                notification_id, user_id=user_id
            )
        self._publish_updates(changed)
        return changed

    def mark_all_read(self, user_id: str) -> list[Notification]:
        with _store_session(self._session_factory) as session:
            changed = NotificationRepository(session).mark_all_read(user_id)
        self._publish_updates(changed)
        return changed

    def _publish_updates(self, changed: Sequence[Notification]) -> None:
        for notification in changed:
            new = serialize_notification(notification)
            self._feed.publish(
                NOTIFICATIONS_TABLE, EVENT_UPDATE, new=new, old={**new, "read": False}
            )


class AuthAdmin:
    """Access to the auth user directory."""

    def __init__(self, session_factory: sessionmaker[Session], *, privileged: bool) -> None:
        self._session_factory = session_factory
        self._privileged = privileged

    def list_users(self, *, page: int = 1, per_page: int = 1000) -> list[AuthUser]:
        """Return one page of users (privileged)."""

        if not self._privileged:
            raise BackendAuthorizationError("Listing users requires the service role")
        with _store_session(self._session_factory) as session:
            return list(AuthUserRepository(session).list_page(page=page, per_page=per_page))

    def iter_users(self, *, per_page: int = 1000) -> Iterator[AuthUser]:
        """Yield every registered user, fetching one page at a time."""

        page = 1
        while True:
            batch = self.list_users(page=page, per_page=per_page)
            yield from batch
            if len(batch) < per_page:
                return
            page += 1

    def get_user(self, user_id: str) -> AuthUser | None:
        with _store_session(self._session_factory) as session:
            return AuthUserRepository(session).get(user_id)

    def get_user_by_email(self, email: str) -> AuthUser | None:
        with _store_session(self._session_factory) as session:
            return AuthUserRepository(session).get_by_email(email)

    def create_user(
        self,
        *,
        email: str,
        password_hash: str | None,
        user_metadata: dict[str, Any] | None = None,
    ) -> AuthUser:
        """Register a new account; raises ``ValueError`` for a taken email."""

        try:
            with _store_session(self._session_factory) as session:
                return AuthUserRepository(session).create(
                    email=email, password_hash=password_hash, user_metadata=user_metadata
                )
        except BackendError as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise ValueError("A user with this email already exists") from exc
            raise


@dataclass
class BackendClient:
    """One handle over the store, either public or privileged."""

    notifications: NotificationTable
    auth: AuthAdmin
    realtime: ChangeFeed
    privileged: bool


@dataclass
class BackendClients:
    """The process-wide pair of handles built from configuration."""

    public: BackendClient
    admin: BackendClient | None
    engine: Engine

    def dispose(self) -> None:
        self.engine.dispose()


def _build_client(
    session_factory: sessionmaker[Session], feed: ChangeFeed, *, privileged: bool
) -> BackendClient:
    return BackendClient(
        notifications=NotificationTable(session_factory, feed, privileged=privileged),
        auth=AuthAdmin(session_factory, privileged=privileged),
        realtime=feed,
        privileged=privileged,
    )


def create_backend_clients(
    settings: Settings,
    *,
    feed: ChangeFeed | None = None,
    initialize: bool = True,
) -> BackendClients:
    """Build the public handle and, when configured, the privileged one."""

    engine = create_database_engine(settings.database_url)
    if initialize:
        initialize_database(engine)
    session_factory = create_session_factory(engine)
    shared_feed = feed or ChangeFeed()

    public = _build_client(session_factory, shared_feed, privileged=False)
    admin = None
    if settings.privileged_enabled:
        admin = _build_client(session_factory, shared_feed, privileged=True)
    else:
        logger.warning(
            "SERVICE_ROLE_KEY is not configured; privileged operations will report as unavailable"
        )
    return BackendClients(public=public, admin=admin, engine=engine)


__all__ = [
    "AuthAdmin",
    "BackendClient",
    "BackendClients",
    "NOTIFICATIONS_TABLE",
    "NotificationTable",
    "create_backend_clients",
]
