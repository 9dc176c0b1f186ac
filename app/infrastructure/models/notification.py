"""SQLAlchemy model for persisted notifications."""

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.sql import expression

from app.infrastructure.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_created", "user_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(32), nullable=False, default="system")
    read = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    # ``metadata`` is reserved on declarative classes.
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)
    dispatch_id = Column(String(64), nullable=True, index=True)
    created_at = Column(DateTime(), nullable=False)
    updated_at = Column(DateTime(), nullable=False)


class NotificationDispatchModel(Base):
    """Claimed dispatch ids; the primary key makes a replayed dispatch fail to commit."""

    __tablename__ = "notification_dispatches"

    id = Column(String(64), primary_key=True)
    row_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(), nullable=False)


__all__ = ["NotificationDispatchModel", "NotificationModel"]
