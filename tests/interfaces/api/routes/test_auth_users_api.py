"""Integration tests for signup, session tokens and the user directory."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from main import create_app

ANON_HEADERS = {"apikey": "test-anon-key"}
SERVICE_HEADERS = {"apikey": "test-service-role-key"}


@pytest.fixture()
def api(settings, clients):
    app = create_app(settings)
    app.state.backend = clients
    with TestClient(app) as test_client:
        yield test_client


def _login(api: TestClient, email: str, password: str):
    return api.post(
        "/auth/token",
        data={"username": email, "password": password},
        headers={**ANON_HEADERS, "Content-Type": "application/x-www-form-urlencoded"},
    )


def test_signup_creates_customer_and_notifies_admins(api, clients, make_user) -> None:
    admin = make_user("admin@example.com", role="admin")

    response = api.post(
        "/auth/signup",
        json={
            "email": "New.User@Example.com",
            "password": "Secret123",
            "name": "New User",
            "role": "admin",
        },
        headers=ANON_HEADERS,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "new.user@example.com"
    assert body["role"] == "customer"
    assert body["user_metadata"]["full_name"] == "New User"

    notifications = clients.public.notifications.select(user_id=admin.id)
    assert len(notifications) == 1
    assert notifications[0].type == "new_signup"
    assert notifications[0].message == "New user signed up: New User"
    assert notifications[0].metadata["email"] == "new.user@example.com"


def test_service_role_may_choose_role(api) -> None:
    response = api.post(
        "/auth/signup",
        json={"email": "vendor@example.com", "password": "Secret123", "role": "vendor"},
        headers=SERVICE_HEADERS,
    )

    assert response.status_code == 201
    assert response.json()["role"] == "vendor"


def test_signup_rejects_bad_input(api, make_user) -> None:
    make_user("taken@example.com")

    duplicate = api.post(
        "/auth/signup",
        json={"email": "taken@example.com", "password": "Secret123"},
        headers=ANON_HEADERS,
    )
    short_password = api.post(
        "/auth/signup",
        json={"email": "short@example.com", "password": "123"},
        headers=ANON_HEADERS,
    )
    unknown_role = api.post(
        "/auth/signup",
        json={"email": "odd@example.com", "password": "Secret123", "role": "superuser"},
        headers=SERVICE_HEADERS,
    )
    no_key = api.post(
        "/auth/signup", json={"email": "nokey@example.com", "password": "Secret123"}
    )

    assert duplicate.status_code == 400
    assert short_password.status_code == 422
    assert unknown_role.status_code == 400
    assert no_key.status_code == 401


def test_login_issues_token_for_current_user(api, make_user) -> None:
    user = make_user("buyer@example.com", password="Secret123", name="Buyer")

    response = _login(api, "buyer@example.com", "Secret123")

    assert response.status_code == 200
    token = response.json()
    assert token["token_type"] == "bearer"
    assert token["user_id"] == user.id
    assert token["role"] == "customer"

    me = api.get("/users/me", headers={"Authorization": f"Bearer {token['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "buyer@example.com"


def test_login_failures(api, make_user) -> None:
    make_user("buyer@example.com", password="Secret123")
    make_user("banned@example.com", password="Secret123", status="suspended")

    assert _login(api, "buyer@example.com", "wrong-pass").status_code == 401
    assert _login(api, "ghost@example.com", "Secret123").status_code == 401
    assert _login(api, "banned@example.com", "Secret123").status_code == 403


def test_user_listing_is_privileged_and_filterable(api, make_user) -> None:
    admin = make_user("admin@example.com", role="admin")
    make_user("vendor@example.com", role="vendor")
    suspended = make_user("banned@example.com", role="vendor", status="suspended")

    assert api.get("/users/", headers=ANON_HEADERS).status_code == 403

    everyone = api.get("/users/", headers=SERVICE_HEADERS)
    admins = api.get("/users/", params={"role": "admin"}, headers=SERVICE_HEADERS)
    banned = api.get("/users/", params={"status": "suspended"}, headers=SERVICE_HEADERS)

    assert len(everyone.json()) == 3
    assert [item["id"] for item in admins.json()] == [admin.id]
    assert [item["id"] for item in banned.json()] == [suspended.id]
