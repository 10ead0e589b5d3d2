from __future__ import annotations

from fastapi.testclient import TestClient

from coursehub.models.user import Role
from tests.conftest import auth, create_course, create_user, enroll


def test_admin_lists_users_with_counts(client: TestClient, admin, author, student) -> None:
    enroll(student, create_course(author))
    create_course(author)

    body = client.get("/users", headers=auth(admin)).json()
    assert body["total"] == 3
    rows = {u["id"]: u for u in body["users"]}
    assert rows[str(author.id)]["counts"] == {"coursesAuthored": 2, "enrollments": 0}
    assert rows[str(student.id)]["counts"] == {"coursesAuthored": 0, "enrollments": 1}
    assert "passwordHash" not in rows[str(student.id)]


def test_filter_by_role_and_query(client: TestClient, admin) -> None:
    create_user(Role.AUTHOR, email="grace@example.com", name="Grace Hopper")
    create_user(Role.STUDENT, email="alan@example.com", name="Alan Turing")

    authors = client.get("/users?role=AUTHOR", headers=auth(admin)).json()
    assert [u["email"] for u in authors["users"]] == ["grace@example.com"]

    found = client.get("/users?q=turing", headers=auth(admin)).json()
    assert [u["email"] for u in found["users"]] == ["alan@example.com"]

    # unknown role filter is ignored
    assert client.get("/users?role=WIZARD", headers=auth(admin)).json()["total"] == 3


def test_admin_changes_role(client: TestClient, admin, student) -> None:
    resp = client.patch(
        f"/users/{student.id}/role", json={"role": "AUTHOR"}, headers=auth(admin)
    )
    assert resp.status_code == 200
    assert resp.json()["role"] == "AUTHOR"


def test_invalid_role_is_400(client: TestClient, admin, student) -> None:
    resp = client.patch(
        f"/users/{student.id}/role", json={"role": "OWNER"}, headers=auth(admin)
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "role must be one of STUDENT, AUTHOR, ADMIN"}


def test_unknown_user_is_404(client: TestClient, admin) -> None:
    resp = client.patch(
        "/users/00000000-0000-0000-0000-000000000000/role",
        json={"role": "AUTHOR"},
        headers=auth(admin),
    )
    assert resp.status_code == 404


def test_role_change_applies_at_next_login(client: TestClient, admin) -> None:
    user = create_user(Role.STUDENT, email="late@example.com", password="password-123")
    old_token = client.post(
        "/auth/login", json={"email": "late@example.com", "password": "password-123"}
    ).json()["accessToken"]

    client.patch(f"/users/{user.id}/role", json={"role": "AUTHOR"}, headers=auth(admin))

    stale = client.get("/author/courses", headers={"Authorization": f"Bearer {old_token}"})
    assert stale.status_code == 403

    new_token = client.post(
        "/auth/login", json={"email": "late@example.com", "password": "password-123"}
    ).json()["accessToken"]
    fresh = client.get("/author/courses", headers={"Authorization": f"Bearer {new_token}"})
    assert fresh.status_code == 200
