"""Shared fixtures: every test gets its own SQLite store and client handles."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

# ``main`` builds its application at import time, so a usable configuration must
# exist before any test module imports it.
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{Path(tempfile.gettempdir()) / 'notifications_test.db'}"
)
os.environ.setdefault("ANON_KEY", "test-anon-key")
os.environ.setdefault("SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")

from app.application.use_cases.notifications import NotificationDispatcher  # noqa: E402
from app.config import Settings, get_settings, reset_settings_cache  # noqa: E402
from app.domain.entities import AuthUser  # noqa: E402
from app.infrastructure.backend import BackendClients, create_backend_clients  # noqa: E402
from app.infrastructure.security import get_password_hash  # noqa: E402

ANON_KEY = "test-anon-key"
SERVICE_ROLE_KEY = "test-service-role-key"


@pytest.fixture()
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Point the configuration at a fresh database file."""

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'store.db'}")
    monkeypatch.setenv("ANON_KEY", ANON_KEY)
    monkeypatch.setenv("SERVICE_ROLE_KEY", SERVICE_ROLE_KEY)
    monkeypatch.setenv("JWT_SECRET", "test-jwt-secret")
    reset_settings_cache()
    yield get_settings()
    reset_settings_cache()


@pytest.fixture()
def clients(settings: Settings) -> BackendClients:
    backend = create_backend_clients(settings)
    yield backend
    backend.dispose()


@pytest.fixture()
def dispatcher(clients: BackendClients) -> NotificationDispatcher:
    return NotificationDispatcher(clients.admin, page_size=2)


@pytest.fixture()
def make_user(clients: BackendClients):
    """Return a factory that registers users directly in the directory."""

    def _make(
        email: str,
        *,
        role: str | None = "customer",
        status: str | None = None,
        password: str | None = None,
        name: str | None = None,
    ) -> AuthUser:
        metadata = {}
        if role is not None:
            metadata["role"] = role
        if status is not None:
            metadata["status"] = status
        if name is not None:
            metadata["name"] = name
            metadata["full_name"] = name
        return clients.admin.auth.create_user(
            email=email,
            password_hash=get_password_hash(password) if password else None,
            user_metadata=metadata,
        )

    return _make
