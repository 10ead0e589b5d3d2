from __future__ import annotations

from fastapi.testclient import TestClient

from coursehub.models.course import CourseStatus
from coursehub.models.review import Review
from coursehub.models.user import Role
from tests.conftest import auth, create_course, create_user, enroll, run


# ---- course moderation list ----


def test_admin_course_list_sees_every_status(client: TestClient, admin, author) -> None:
    create_course(author, "Live")
    create_course(author, "Waiting", status=CourseStatus.PENDING)

    everything = client.get("/admin/courses", headers=auth(admin)).json()
    assert everything["total"] == 2

    pending = client.get("/admin/courses?status=PENDING", headers=auth(admin)).json()
    assert [c["title"] for c in pending["courses"]] == ["Waiting"]


# ---- revenue and payouts ----


def test_revenue_report_and_payouts(client: TestClient, admin) -> None:
    author = create_user(Role.AUTHOR, name="Ada")
    paid = create_course(author, "Paid", is_paid=True, price="20")
    create_course(author, "Free")
    create_course(author, "Unlisted", status=CourseStatus.DRAFT, is_paid=True, price="99")
    for _ in range(3):
        enroll(create_user(Role.STUDENT), paid)

    resp = client.post(
        "/admin/payouts",
        json={"authorId": str(author.id), "amount": 25, "note": " March "},
        headers=auth(admin),
    )
    assert resp.status_code == 201
    assert resp.json()["amount"] == 25.0
    assert resp.json()["note"] == "March"
    assert resp.json()["status"] == "completed"

    report = client.get("/admin/revenue", headers=auth(admin)).json()
    (course_row,) = report["revenueByCourse"]
    assert course_row["slug"] == paid.slug
    assert course_row["enrollments"] == 3
    assert course_row["revenue"] == 60.0

    (author_row,) = report["revenueByAuthor"]
    assert author_row == {
        "authorId": str(author.id),
        "authorName": "Ada",
        "earnings": 60.0,
        "paidOut": 25.0,
        "pending": 35.0,
    }
    assert report["totals"] == {
        "platformRevenue": 60.0,
        "totalPaidOut": 25.0,
        "totalPending": 35.0,
    }
    assert report["recentPayouts"][0]["authorName"] == "Ada"


def test_overpayment_floors_pending_at_zero(client: TestClient, admin) -> None:
    author = create_user(Role.AUTHOR)
    course = create_course(author, is_paid=True, price="10")
    enroll(create_user(Role.STUDENT), course)

    for amount in (7, 7):
        client.post(
            "/admin/payouts",
            json={"authorId": str(author.id), "amount": amount},
            headers=auth(admin),
        )
    (row,) = client.get("/admin/revenue", headers=auth(admin)).json()["revenueByAuthor"]
    assert row["paidOut"] == 14.0
    assert row["pending"] == 0.0


def test_price_change_rewrites_revenue(client: TestClient, admin) -> None:
    author = create_user(Role.AUTHOR)
    course = create_course(author, is_paid=True, price="10")
    enroll(create_user(Role.STUDENT), course)

    client.patch(f"/courses/{course.slug}", json={"price": 30}, headers=auth(admin))
    (row,) = client.get("/admin/revenue", headers=auth(admin)).json()["revenueByCourse"]
    assert row["revenue"] == 30.0


def test_payout_validation(client: TestClient, admin, author) -> None:
    def post(body: dict) -> object:
        return client.post("/admin/payouts", json=body, headers=auth(admin))

    missing = post({"amount": 10})
    assert missing.status_code == 400
    assert missing.json() == {"error": "authorId is required"}

    for amount in (0, -5, "abc", None, True):
        resp = post({"authorId": str(author.id), "amount": amount})
        assert resp.status_code == 400, amount
        assert resp.json() == {"error": "amount must be a positive number"}

    tiny = post({"authorId": str(author.id), "amount": 0.001})
    assert tiny.status_code == 400
    assert tiny.json() == {"error": "amount must be at least 0.01"}

    huge = post({"authorId": str(author.id), "amount": 1e12})
    assert huge.status_code == 400
    assert huge.json() == {"error": "amount must be at most 99999999.99"}

    rounded = post({"authorId": str(author.id), "amount": 10.005})
    assert rounded.status_code == 201
    assert rounded.json()["amount"] == 10.01

    ghost = post({"authorId": "00000000-0000-0000-0000-000000000000", "amount": 10})
    assert ghost.status_code == 404
    assert ghost.json() == {"error": "Author not found"}


def test_payouts_admin_only(client: TestClient, author) -> None:
    resp = client.post(
        "/admin/payouts", json={"authorId": str(author.id), "amount": 5}, headers=auth(author)
    )
    assert resp.status_code == 403


# ---- analytics and activity ----


def test_analytics_shape_and_clamping(client: TestClient, admin, author, student) -> None:
    course = create_course(author, "Popular")
    create_course(author, "Draft", status=CourseStatus.DRAFT)
    enroll(student, course)

    body = client.get("/admin/analytics?days=1", headers=auth(admin)).json()
    assert body["days"] == 7
    assert body["totals"] == {"users": 3, "courses": 2, "enrollments": 1}
    assert body["coursesByStatus"] == {
        "DRAFT": 1,
        "PENDING": 0,
        "PUBLISHED": 1,
        "REJECTED": 0,
    }
    assert sum(d["count"] for d in body["enrollmentsByDay"]) == 1
    assert body["topCourses"][0]["slug"] == course.slug
    assert body["topCourses"][0]["enrollments"] == 1
    assert body["newUsersLastNDays"] == 3

    assert client.get("/admin/analytics?days=400", headers=auth(admin)).json()["days"] == 90
    assert client.get("/admin/analytics", headers=auth(admin)).json()["days"] == 30


def test_activity_feed_merges_event_kinds(
    client: TestClient, repos, admin, author, student
) -> None:
    course = create_course(author, "Knitting")
    enroll(student, course)
    run(
        repos.reviews.upsert(
            Review.new(course_id=course.id, user_id=student.id, rating=4, comment="Cosy")
        )
    )

    body = client.get("/admin/activity", headers=auth(admin)).json()
    kinds = {a["type"] for a in body["activities"]}
    assert kinds == {"enrollment", "user_signup", "review"}
    dates = [a["date"] for a in body["activities"]]
    assert dates == sorted(dates, reverse=True)

    limited = client.get("/admin/activity?limit=2", headers=auth(admin)).json()
    assert len(limited["activities"]) == 2


# ---- stripe settings ----


def test_stripe_settings_masked_and_blank_keeps_value(client: TestClient, admin) -> None:
    empty = client.get("/admin/settings/stripe", headers=auth(admin)).json()
    assert empty == {
        "stripePublishableKey": "",
        "stripeSecretKey": "",
        "stripeWebhookSecret": "",
        "configured": False,
    }

    updated = client.patch(
        "/admin/settings/stripe",
        json={
            "stripePublishableKey": "pk_test_abcdefghijklmnop",
            "stripeSecretKey": "sk_test_abcdefghijklmnop",
            "stripeWebhookSecret": "whsec_abcdefghijklmnop",
        },
        headers=auth(admin),
    ).json()
    assert updated["stripeSecretKey"] == "sk_test***mnop"
    assert updated["configured"] is True
    assert "abcdefghijkl" not in str(updated)

    kept = client.patch(
        "/admin/settings/stripe",
        json={"stripeSecretKey": "", "stripeWebhookSecret": "whsec_zyxwvutsrqpo"},
        headers=auth(admin),
    ).json()
    assert kept["stripeSecretKey"] == "sk_test***mnop"
    assert kept["stripeWebhookSecret"] == "whsec_z***rqpo"


def test_stripe_settings_admin_only(client: TestClient, author) -> None:
    assert client.get("/admin/settings/stripe", headers=auth(author)).status_code == 403
