"""Course catalogue and the publication state machine.

Status moves:

  author (owner)  submit   DRAFT|REJECTED|PENDING -> PENDING
  admin           submit   any -> PUBLISHED (stamps published_at)
  admin           approve  any -> PUBLISHED (stamps published_at)
  admin           deny     any -> REJECTED
  admin           archive  any -> DRAFT
  admin           status   any -> REJECTED|DRAFT|PUBLISHED

Authors never reach PUBLISHED or REJECTED on their own. Admin moves are
unconditional.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from coursehub.core.errors import Conflict, NotFound, ValidationFailed
from coursehub.core.metrics import COURSE_STATUS_TRANSITIONS
from coursehub.models.course import Course, CourseStatus, Module, slugify
from coursehub.models.principal import Principal
from coursehub.models.user import User
from coursehub.repos.course_repo import CourseRepo
from coursehub.repos.registry import Repos
from coursehub.services.access import check_owner_or_admin, check_visible

logger = logging.getLogger(__name__)

ADMIN_SETTABLE_STATUSES = (
    CourseStatus.REJECTED,
    CourseStatus.DRAFT,
    CourseStatus.PUBLISHED,
)
AUTHOR_SUBMITTABLE_FROM = frozenset(
    {CourseStatus.DRAFT, CourseStatus.REJECTED, CourseStatus.PENDING}
)


@dataclass(frozen=True, slots=True)
class CourseCard:
    """A course with the author and counters list views show beside it."""

    course: Course
    author: User | None
    enrollment_count: int
    review_count: int


@dataclass(frozen=True, slots=True)
class CourseDetail:
    card: CourseCard
    modules: list[Module]


async def unique_slug(
    repo: CourseRepo, title: str, *, current_id: UUID | None = None
) -> str:
    """Slug for ``title``, suffixed with a random token until unused."""
    base = slugify(title)
    candidate = base
    while True:
        holder = await repo.get_by_slug(candidate)
        if holder is None or holder.id == current_id:
            return candidate
        candidate = f"{base}-{uuid4().hex[:8]}"


async def build_cards(repos: Repos, courses: Sequence[Course]) -> list[CourseCard]:
    ids = [c.id for c in courses]
    authors = await repos.users.get_many(c.author_id for c in courses)
    enrollments = await repos.enrollments.count_by_course(ids)
    reviews = await repos.reviews.count_by_course(ids)
    return [
        CourseCard(
            course=c,
            author=authors.get(c.author_id),
            enrollment_count=enrollments.get(c.id, 0),
            review_count=reviews.get(c.id, 0),
        )
        for c in courses
    ]


async def _load(repo: CourseRepo, slug: str) -> Course:
    course = await repo.get_by_slug(slug)
    if course is None:
        raise NotFound("Course not found")
    return course


async def get_visible_course(
    repos: Repos, principal: Principal | None, slug: str
) -> Course:
    course = await _load(repos.courses, slug)
    check_visible(principal, course)
    return course


async def get_manageable_course(repos: Repos, principal: Principal, slug: str) -> Course:
    course = await _load(repos.courses, slug)
    check_owner_or_admin(principal, course)
    return course


# --- catalogue ---


async def list_courses(
    repos: Repos,
    principal: Principal | None,
    *,
    status: CourseStatus | None,
    category: str | None,
    q: str,
    limit: int,
    offset: int,
) -> tuple[list[CourseCard], int]:
    """Public listing. Only admins may look past PUBLISHED."""
    if principal is None or not principal.is_admin():
        status = CourseStatus.PUBLISHED
    courses, total = await repos.courses.search(
        status=status, category=category, q=q, limit=limit, offset=offset
    )
    return await build_cards(repos, courses), total


async def list_author_courses(
    repos: Repos,
    principal: Principal,
    *,
    status: CourseStatus | None,
    limit: int,
    offset: int,
) -> tuple[list[CourseCard], int]:
    courses, total = await repos.courses.search(
        status=status, author_id=UUID(principal.user_id), limit=limit, offset=offset
    )
    return await build_cards(repos, courses), total


async def list_all_courses(
    repos: Repos, *, status: CourseStatus | None, limit: int, offset: int
) -> tuple[list[CourseCard], int]:
    courses, total = await repos.courses.search(status=status, limit=limit, offset=offset)
    return await build_cards(repos, courses), total


async def get_course_detail(
    repos: Repos, principal: Principal | None, slug: str
) -> CourseDetail:
    course = await get_visible_course(repos, principal, slug)
    (card,) = await build_cards(repos, [course])
    return CourseDetail(card=card, modules=await repos.courses.list_modules(course.id))


async def create_course(
    repos: Repos,
    principal: Principal,
    *,
    title: str,
    author_id: UUID | None = None,
    **details: Any,
) -> Course:
    """AUTHOR-created courses start as DRAFT; ADMIN-created ones go live.

    Admins may create on behalf of another author via ``author_id``.
    """
    is_admin = principal.is_admin()
    owner = author_id if is_admin and author_id is not None else UUID(principal.user_id)
    if is_admin and author_id is not None and await repos.users.get_by_id(author_id) is None:
        raise NotFound("Author not found")

    course = Course.new(
        author_id=owner,
        title=title,
        slug=await unique_slug(repos.courses, title),
        status=CourseStatus.PUBLISHED if is_admin else CourseStatus.DRAFT,
        **details,
    )
    if not await repos.courses.add(course):
        # slug claimed by a concurrent create since unique_slug looked
        course = replace(course, slug=await unique_slug(repos.courses, title))
        if not await repos.courses.add(course):
            raise Conflict("A course with this slug already exists")
    logger.info(
        "Course created slug=%s status=%s by user=%s",
        course.slug,
        course.status.value,
        principal.user_id,
        extra={"user_id": principal.user_id, "course_id": str(course.id)},
    )
    return course


async def update_course(
    repos: Repos, principal: Principal, slug: str, changes: dict[str, Any]
) -> Course:
    """Apply a partial update. A new title re-derives the slug."""
    course = await get_manageable_course(repos, principal, slug)
    changes = dict(changes)
    if not changes.get("title"):
        changes.pop("title", None)
    elif changes["title"] != course.title:
        changes["slug"] = await unique_slug(
            repos.courses, changes["title"], current_id=course.id
        )

    updated = replace(course, **changes, updated_at=datetime.now(UTC))
    await repos.courses.save(updated)
    return updated


async def delete_course(repos: Repos, principal: Principal, slug: str) -> None:
    course = await get_manageable_course(repos, principal, slug)
    modules = await repos.courses.list_modules(course.id)
    await repos.enrollments.delete_completions(m.id for m in modules)
    await repos.enrollments.delete_for_course(course.id)
    await repos.reviews.delete_for_course(course.id)
    await repos.courses.delete(course.id)
    logger.info(
        "Course deleted slug=%s by user=%s",
        course.slug,
        principal.user_id,
        extra={"user_id": principal.user_id, "course_id": str(course.id)},
    )


# --- status machine ---


async def _transition(
    repos: Repos, principal: Principal, course: Course, to_status: CourseStatus
) -> Course:
    now = datetime.now(UTC)
    published_at = now if to_status == CourseStatus.PUBLISHED else course.published_at
    updated = replace(course, status=to_status, published_at=published_at, updated_at=now)
    await repos.courses.save(updated)
    COURSE_STATUS_TRANSITIONS.labels(
        to_status=to_status.value, actor_role=principal.role.value
    ).inc()
    logger.info(
        "Course %s: %s -> %s by user=%s",
        course.slug,
        course.status.value,
        to_status.value,
        principal.user_id,
        extra={"user_id": principal.user_id, "course_id": str(course.id)},
    )
    return updated


async def submit_course(repos: Repos, principal: Principal, slug: str) -> Course:
    """Author asks for review; an admin submitting publishes directly."""
    course = await get_manageable_course(repos, principal, slug)
    if principal.is_admin():
        return await _transition(repos, principal, course, CourseStatus.PUBLISHED)
    if course.status not in AUTHOR_SUBMITTABLE_FROM:
        raise ValidationFailed("Course is already published")
    return await _transition(repos, principal, course, CourseStatus.PENDING)


async def set_course_status(
    repos: Repos, principal: Principal, slug: str, raw_status: str | None
) -> Course:
    """Admin override. The current status is not consulted."""
    course = await _load(repos.courses, slug)
    try:
        to_status = CourseStatus(raw_status)
    except ValueError:
        to_status = None
    if to_status not in ADMIN_SETTABLE_STATUSES:
        raise ValidationFailed("status must be one of REJECTED, DRAFT, PUBLISHED")
    return await _transition(repos, principal, course, to_status)


async def approve_course(repos: Repos, principal: Principal, slug: str) -> Course:
    course = await _load(repos.courses, slug)
    return await _transition(repos, principal, course, CourseStatus.PUBLISHED)


async def deny_course(repos: Repos, principal: Principal, slug: str) -> Course:
    course = await _load(repos.courses, slug)
    return await _transition(repos, principal, course, CourseStatus.REJECTED)


async def archive_course(repos: Repos, principal: Principal, slug: str) -> Course:
    course = await _load(repos.courses, slug)
    return await _transition(repos, principal, course, CourseStatus.DRAFT)
