from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from coursehub.models.course import Course, CourseStatus, slugify
from coursehub.models.principal import Principal
from coursehub.models.user import Role


@pytest.mark.parametrize(
    "title,expected",
    [
        ("Introduction to React", "introduction-to-react"),
        ("  Node.js   Backend!  ", "nodejs-backend"),
        ("C++ & Rust -- a tour", "c-rust-a-tour"),
        ("already-slugged", "already-slugged"),
        ("!!!", "course"),
    ],
)
def test_slugify(title: str, expected: str) -> None:
    assert slugify(title) == expected


def test_new_published_course_stamps_published_at() -> None:
    course = Course.new(author_id=uuid4(), title="T", slug="t", status=CourseStatus.PUBLISHED)
    assert course.published_at is not None
    draft = Course.new(author_id=uuid4(), title="T", slug="t")
    assert draft.status == CourseStatus.DRAFT
    assert draft.published_at is None


def test_earns_revenue_requires_published_paid_and_price() -> None:
    author = uuid4()
    paid = Course.new(
        author_id=author,
        title="T",
        slug="t",
        status=CourseStatus.PUBLISHED,
        is_paid=True,
        price=Decimal("10"),
    )
    assert paid.earns_revenue
    assert not Course.new(author_id=author, title="T", slug="t", is_paid=True, price=Decimal("10")).earns_revenue
    assert not Course.new(author_id=author, title="T", slug="t", status=CourseStatus.PUBLISHED).earns_revenue


def test_principal_can_manage_own_or_as_admin() -> None:
    owner = uuid4()
    assert Principal(user_id=str(owner), role=Role.AUTHOR).can_manage(owner)
    assert not Principal(user_id=str(uuid4()), role=Role.AUTHOR).can_manage(owner)
    assert Principal(user_id=str(uuid4()), role=Role.ADMIN).can_manage(owner)
