"""Revenue and payout reconciliation.

Revenue is derived on every read, never stored: each PUBLISHED paid
course earns ``price * current enrollment count``, so a price change
rewrites history. Payouts are the only ledger. An author appears in the
report only when they own at least one earning course, and only those
authors' payouts count towards ``totalPaidOut``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from uuid import UUID

from coursehub.core.errors import NotFound, ValidationFailed
from coursehub.core.metrics import PAYOUTS_RECORDED
from coursehub.models.course import Course
from coursehub.models.money import CENT, MAX_AMOUNT, to_cents
from coursehub.models.payout import Payout
from coursehub.models.user import User
from coursehub.repos.registry import Repos

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
RECENT_PAYOUTS_LIMIT = 20


@dataclass(frozen=True, slots=True)
class CourseRevenue:
    course_id: UUID
    title: str
    slug: str
    author_id: UUID
    author_name: str
    price: Decimal
    enrollments: int
    revenue: Decimal


@dataclass(frozen=True, slots=True)
class AuthorBalance:
    author_id: UUID
    author_name: str
    earnings: Decimal
    paid_out: Decimal
    pending: Decimal


@dataclass(frozen=True, slots=True)
class RevenueReport:
    by_course: list[CourseRevenue]
    by_author: list[AuthorBalance]
    platform_revenue: Decimal
    total_paid_out: Decimal
    total_pending: Decimal


def reconcile(
    courses: Iterable[Course],
    enrollment_counts: Mapping[UUID, int],
    payout_totals: Mapping[UUID, Decimal],
    authors: Mapping[UUID, User],
) -> RevenueReport:
    """Pure reconciliation over already-loaded data."""
    by_course: list[CourseRevenue] = []
    earnings: dict[UUID, Decimal] = {}
    for c in courses:
        if not c.earns_revenue:
            continue
        price = c.price or ZERO
        count = enrollment_counts.get(c.id, 0)
        revenue = price * count
        author = authors.get(c.author_id)
        by_course.append(
            CourseRevenue(
                course_id=c.id,
                title=c.title,
                slug=c.slug,
                author_id=c.author_id,
                author_name=author.display_name if author else "",
                price=price,
                enrollments=count,
                revenue=revenue,
            )
        )
        earnings[c.author_id] = earnings.get(c.author_id, ZERO) + revenue

    by_author = []
    for author_id, earned in earnings.items():
        paid = payout_totals.get(author_id, ZERO)
        author = authors.get(author_id)
        by_author.append(
            AuthorBalance(
                author_id=author_id,
                author_name=author.display_name if author else "",
                earnings=earned,
                paid_out=paid,
                pending=max(ZERO, earned - paid),
            )
        )
    by_author.sort(key=lambda a: a.earnings, reverse=True)

    return RevenueReport(
        by_course=by_course,
        by_author=by_author,
        platform_revenue=sum((r.revenue for r in by_course), ZERO),
        total_paid_out=sum((a.paid_out for a in by_author), ZERO),
        total_pending=sum((a.pending for a in by_author), ZERO),
    )


async def revenue_report(repos: Repos) -> tuple[RevenueReport, list[tuple[Payout, User | None]]]:
    courses = await repos.courses.list_revenue_courses()
    counts = await repos.enrollments.count_by_course(c.id for c in courses)
    payout_totals = await repos.payouts.totals_by_author()
    recent = await repos.payouts.recent(RECENT_PAYOUTS_LIMIT)
    authors = await repos.users.get_many(
        [c.author_id for c in courses] + [p.author_id for p in recent]
    )
    report = reconcile(courses, counts, payout_totals, authors)
    return report, [(p, authors.get(p.author_id)) for p in recent]


def _positive_amount(raw: object) -> Decimal:
    if isinstance(raw, bool):
        raise ValidationFailed("amount must be a positive number")
    try:
        amount = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise ValidationFailed("amount must be a positive number") from None
    if not amount.is_finite() or amount <= 0:
        raise ValidationFailed("amount must be a positive number")
    if amount > MAX_AMOUNT:
        raise ValidationFailed(f"amount must be at most {MAX_AMOUNT}")
    amount = to_cents(amount)
    if amount < CENT:
        raise ValidationFailed(f"amount must be at least {CENT}")
    return amount


async def record_payout(
    repos: Repos,
    *,
    author_id: UUID | None,
    amount: object,
    note: str | None = None,
) -> Payout:
    """Append a completed payout. Overpaying the pending balance is allowed."""
    if author_id is None:
        raise ValidationFailed("authorId is required")
    value = _positive_amount(amount)
    if await repos.users.get_by_id(author_id) is None:
        raise NotFound("Author not found")

    payout = Payout.new(author_id=author_id, amount=value, note=(note or "").strip() or None)
    await repos.payouts.add(payout)
    PAYOUTS_RECORDED.inc()
    logger.info("Payout recorded author=%s amount=%s", author_id, value)
    return payout
