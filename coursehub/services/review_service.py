from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from coursehub.core.errors import Forbidden
from coursehub.core.metrics import REVIEWS_SUBMITTED
from coursehub.models.principal import Principal
from coursehub.models.review import Review, average_rating
from coursehub.models.user import User
from coursehub.repos.registry import Repos
from coursehub.services.course_service import get_visible_course

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReviewSummary:
    reviews: list[tuple[Review, User | None]]
    average_rating: float
    total: int


async def upsert_review(
    repos: Repos,
    principal: Principal,
    slug: str,
    *,
    rating: int,
    comment: str | None = None,
) -> tuple[Review, User | None]:
    """One review per (course, user). An omitted comment keeps the old one."""
    course = await get_visible_course(repos, principal, slug)
    user_id = UUID(principal.user_id)
    if await repos.enrollments.get(user_id, course.id) is None:
        logger.warning(
            "Review denied: user=%s not enrolled in course=%s",
            principal.user_id,
            course.slug,
        )
        raise Forbidden("You must be enrolled to review")

    existing = await repos.reviews.get(course.id, user_id)
    now = datetime.now(UTC)
    if existing is None:
        review = Review.new(course_id=course.id, user_id=user_id, rating=rating, comment=comment)
    else:
        review = Review(
            id=existing.id,
            course_id=course.id,
            user_id=user_id,
            rating=rating,
            comment=comment if comment is not None else existing.comment,
            created_at=existing.created_at,
            updated_at=now,
        )

    saved = await repos.reviews.upsert(review)
    REVIEWS_SUBMITTED.labels(result="created" if existing is None else "updated").inc()
    return saved, await repos.users.get_by_id(user_id)


async def list_reviews(
    repos: Repos, principal: Principal | None, slug: str
) -> ReviewSummary:
    course = await get_visible_course(repos, principal, slug)
    reviews = await repos.reviews.list_for_course(course.id)
    authors = await repos.users.get_many(r.user_id for r in reviews)
    return ReviewSummary(
        reviews=[(r, authors.get(r.user_id)) for r in reviews],
        average_rating=average_rating(r.rating for r in reviews),
        total=len(reviews),
    )
