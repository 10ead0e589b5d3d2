from __future__ import annotations

import random
from decimal import Decimal
from uuid import uuid4

from coursehub.models.course import Course, CourseStatus
from coursehub.models.user import Role, User
from coursehub.services.revenue_service import reconcile


def _author(name: str) -> User:
    return User.new(email=f"{name}@example.com", password_hash="x", name=name, role=Role.AUTHOR)


def _course(author: User, price: str | None, *, status=CourseStatus.PUBLISHED, paid=True) -> Course:
    return Course.new(
        author_id=author.id,
        title=f"Course {uuid4().hex[:4]}",
        slug=uuid4().hex,
        status=status,
        is_paid=paid,
        price=Decimal(price) if price is not None else None,
    )


def test_only_published_paid_priced_courses_earn() -> None:
    ada = _author("ada")
    earning = _course(ada, "19.99")
    draft = _course(ada, "50", status=CourseStatus.DRAFT)
    free = _course(ada, None, paid=False)
    counts = {earning.id: 3, draft.id: 10, free.id: 7}

    report = reconcile([earning, draft, free], counts, {}, {ada.id: ada})

    assert [r.course_id for r in report.by_course] == [earning.id]
    assert report.by_course[0].revenue == Decimal("59.97")
    assert report.platform_revenue == Decimal("59.97")
    assert report.by_author[0].author_name == "ada"


def test_pending_is_earnings_minus_payouts_floored_at_zero() -> None:
    ada, bob = _author("ada"), _author("bob")
    courses = [_course(ada, "10"), _course(bob, "25")]
    counts = {courses[0].id: 4, courses[1].id: 2}
    payouts = {ada.id: Decimal("15"), bob.id: Decimal("80")}  # bob is overpaid

    report = reconcile(courses, counts, payouts, {ada.id: ada, bob.id: bob})
    balances = {a.author_id: a for a in report.by_author}

    assert balances[ada.id].earnings == Decimal("40")
    assert balances[ada.id].pending == Decimal("25")
    assert balances[bob.id].earnings == Decimal("50")
    assert balances[bob.id].pending == Decimal("0")
    assert report.total_paid_out == Decimal("95")
    assert report.total_pending == Decimal("25")


def test_pending_never_negative_for_arbitrary_payout_sequences() -> None:
    rng = random.Random(7)
    ada = _author("ada")
    course = _course(ada, "12.50")
    for _ in range(200):
        enrollments = rng.randint(0, 20)
        paid = sum(
            (Decimal(rng.randint(1, 5000)) / 100 for _ in range(rng.randint(0, 6))),
            Decimal("0"),
        )
        report = reconcile([course], {course.id: enrollments}, {ada.id: paid}, {ada.id: ada})
        (balance,) = report.by_author
        assert balance.pending >= 0
        assert balance.pending == max(Decimal("0"), balance.earnings - paid)


def test_authors_without_earning_courses_are_omitted() -> None:
    ada, bob = _author("ada"), _author("bob")
    report = reconcile(
        [_course(ada, "10")], {}, {bob.id: Decimal("30")}, {ada.id: ada, bob.id: bob}
    )
    assert [a.author_id for a in report.by_author] == [ada.id]
    assert report.total_paid_out == Decimal("0")


def test_authors_sorted_by_earnings_desc() -> None:
    ada, bob = _author("ada"), _author("bob")
    small, big = _course(ada, "5"), _course(bob, "100")
    report = reconcile(
        [small, big], {small.id: 1, big.id: 1}, {}, {ada.id: ada, bob.id: bob}
    )
    assert [a.author_name for a in report.by_author] == ["bob", "ada"]
