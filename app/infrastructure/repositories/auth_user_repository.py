"""Persistence layer for the auth user directory."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy.orm import Session

from app.domain.entities import AuthUser
from app.infrastructure.models import AuthUserModel
from app.utils import from_storage_datetime, to_storage_datetime, utc_now


class AuthUserRepository:
    """Provide lookups, registration and paginated listing of users."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_page(self, *, page: int = 1, per_page: int = 1000) -> Sequence[AuthUser]:
        """Return the users on ``page`` (1-based) ordered by registration."""

        if page < 1:
            raise ValueError("page must be 1 or greater")
        query = (
            self.session.query(AuthUserModel)
            .order_by(AuthUserModel.created_at.asc(), AuthUserModel.id.asc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        return [self._to_entity(model) for model in query.all()]

    def get(self, user_id: str) -> AuthUser | None:
        model = self.session.get(AuthUserModel, user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> AuthUser | None:
        model = (
            self.session.query(AuthUserModel)
            .filter(AuthUserModel.email == email.strip().lower())
            .first()
        )
        return self._to_entity(model) if model else None

    def create(
        self,
        *,
        email: str,
        password_hash: str | None,
        user_metadata: dict[str, Any] | None = None,
    ) -> AuthUser:
        model = AuthUserModel()
        model.email = email.strip().lower()
        model.password_hash = password_hash
        model.user_metadata = dict(user_metadata or {})
        model.created_at = to_storage_datetime(utc_now())
        self.session.add(model)
        self.session.commit()
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: AuthUserModel) -> AuthUser:
        return AuthUser(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            user_metadata=dict(model.user_metadata or {}),
            created_at=from_storage_datetime(model.created_at),
        )


__all__ = ["AuthUserRepository"]
