from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from coursehub.models.user import Role
from tests.conftest import create_user, mint_token

PASSWORD = "correct-horse-battery"


def _register(client: TestClient, **overrides) -> object:
    body = {"email": "ada@example.com", "password": PASSWORD, "name": "Ada Lovelace"}
    body.update(overrides)
    return client.post("/auth/register", json=body)


def _login(client: TestClient, email: str, password: str = PASSWORD) -> object:
    return client.post("/auth/login", json={"email": email, "password": password})


# ---- register ----


def test_register_creates_student_by_default(client: TestClient) -> None:
    resp = _register(client, username="ada")
    assert resp.status_code == 201
    user = resp.json()["user"]
    assert user["email"] == "ada@example.com"
    assert user["role"] == "STUDENT"
    assert user["username"] == "ada"
    assert "password" not in user
    assert "passwordHash" not in user


def test_register_as_author(client: TestClient) -> None:
    resp = _register(client, role="AUTHOR")
    assert resp.status_code == 201
    assert resp.json()["user"]["role"] == "AUTHOR"


def test_register_cannot_self_promote_to_admin(client: TestClient) -> None:
    resp = _register(client, role="ADMIN")
    assert resp.status_code == 400
    assert "role" in resp.json()["error"]


def test_register_duplicate_email_conflicts(client: TestClient) -> None:
    assert _register(client).status_code == 201
    resp = _register(client, email="ADA@example.com")
    assert resp.status_code == 409
    assert resp.json()["error"] == "Email already in use"


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"email": "not-an-email"}, "email"),
        ({"password": "short"}, "password"),
        ({"name": ""}, "name"),
    ],
)
def test_register_validation_errors_are_field_mapped(
    client: TestClient, overrides: dict, field: str
) -> None:
    resp = _register(client, **overrides)
    assert resp.status_code == 400
    assert field in resp.json()["error"]


# ---- login / me ----


def test_login_returns_token_usable_on_me(client: TestClient) -> None:
    _register(client, role="AUTHOR")
    resp = _login(client, "ada@example.com")
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["role"] == "AUTHOR"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "ada@example.com"


def test_login_wrong_password_is_401(client: TestClient) -> None:
    _register(client)
    resp = _login(client, "ada@example.com", "wrong-password")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid email or password"}


def test_login_unknown_email_is_indistinguishable(client: TestClient) -> None:
    resp = _login(client, "ghost@example.com")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid email or password"}


def test_me_requires_token(client: TestClient) -> None:
    resp = client.get("/auth/me")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}


def test_me_rejects_garbage_token(client: TestClient) -> None:
    resp = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid token"}


def test_me_for_deleted_user_is_404(client: TestClient) -> None:
    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {mint_token()}"})
    assert resp.status_code == 404


def test_password_never_logged(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG)
    _register(client)
    _login(client, "ada@example.com")
    _login(client, "ada@example.com", "wrong-password-xyz")
    assert PASSWORD not in caplog.text
    assert "wrong-password-xyz" not in caplog.text


# ---- password reset ----


def test_forgot_password_unknown_email_same_message(client: TestClient) -> None:
    resp = client.post("/auth/forgot-password", json={"email": "ghost@example.com"})
    assert resp.status_code == 200
    assert resp.json() == {"message": "If an account exists, you will receive a reset link."}


def test_forgot_then_reset_password(client: TestClient) -> None:
    create_user(Role.STUDENT, email="ada@example.com", password=PASSWORD)

    resp = client.post("/auth/forgot-password", json={"email": "ada@example.com"})
    assert resp.status_code == 200
    link = resp.json()["resetLink"]
    token = link.split("token=")[1]

    resp = client.post(
        "/auth/reset-password", json={"token": token, "password": "a-brand-new-pass"}
    )
    assert resp.status_code == 200
    assert _login(client, "ada@example.com", "a-brand-new-pass").status_code == 200
    assert _login(client, "ada@example.com").status_code == 401

    # single use
    again = client.post(
        "/auth/reset-password", json={"token": token, "password": "yet-another-pass"}
    )
    assert again.status_code == 400
    assert again.json() == {"error": "Invalid or expired reset link"}


def test_reset_with_unknown_token_is_400(client: TestClient) -> None:
    resp = client.post(
        "/auth/reset-password", json={"token": "deadbeef", "password": "a-brand-new-pass"}
    )
    assert resp.status_code == 400
