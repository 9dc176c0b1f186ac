"""SQLAlchemy model for the auth user directory."""

import uuid

from sqlalchemy import JSON, Column, DateTime, String, func

from app.infrastructure.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class AuthUserModel(Base):
    """Database representation of a registered account."""

    __tablename__ = "auth_users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)
    user_metadata = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(), nullable=False, server_default=func.now())


__all__ = ["AuthUserModel"]
