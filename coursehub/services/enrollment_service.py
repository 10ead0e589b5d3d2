"""Enrollment and progress tracking.

Progress is always derived: ``round_half_up(100 * completed / total)`` over
the course's current module list, recomputed on every completion call.
``completed_at`` is stamped on every completion call made at 100% and is
kept even if modules are added afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from coursehub.core.errors import Conflict, Forbidden, NotFound, ValidationFailed
from coursehub.core.metrics import (
    COURSES_COMPLETED,
    ENROLLMENTS_CREATED,
    MODULE_COMPLETIONS,
)
from coursehub.models.course import Course
from coursehub.models.enrollment import Enrollment, ModuleCompletion
from coursehub.models.principal import Principal
from coursehub.models.user import Role
from coursehub.repos.registry import Repos
from coursehub.services.notification_service import notify

logger = logging.getLogger(__name__)

ENROLLING_ROLES = {Role.STUDENT, Role.ADMIN}


@dataclass(frozen=True, slots=True)
class CompletionResult:
    progress: int
    completed: bool


def enrollment_body(enrollment: Enrollment) -> dict:
    return {
        "id": str(enrollment.id),
        "userId": str(enrollment.user_id),
        "courseId": str(enrollment.course_id),
        "progress": enrollment.progress,
        "enrolledAt": enrollment.enrolled_at.isoformat(),
        "completedAt": enrollment.completed_at.isoformat()
        if enrollment.completed_at
        else None,
    }


async def enroll(repos: Repos, principal: Principal, course_id: str | None) -> Enrollment:
    if not principal.has_any_role(ENROLLING_ROLES):
        logger.warning("Enroll denied: user=%s role=%s", principal.user_id, principal.role.value)
        raise Forbidden()
    if not course_id:
        raise ValidationFailed("courseId is required")

    course = await _course_by_raw_id(repos, course_id)
    if not course.is_published:
        raise ValidationFailed("Course is not available for enrollment")

    user_id = UUID(principal.user_id)
    existing = await repos.enrollments.get(user_id, course.id)
    if existing is not None:
        raise _already_enrolled(existing)

    enrollment = Enrollment.new(user_id=user_id, course_id=course.id)
    if not await repos.enrollments.add(enrollment):
        # a concurrent request inserted the same pair after our read
        raise _already_enrolled(await repos.enrollments.get(user_id, course.id))
    ENROLLMENTS_CREATED.inc()
    logger.info(
        "User %s enrolled in course=%s",
        principal.user_id,
        course.slug,
        extra={"user_id": principal.user_id, "course_id": str(course.id)},
    )

    await _notify_author(repos, course)
    return enrollment


async def _course_by_raw_id(repos: Repos, raw: str) -> Course:
    try:
        course_id = UUID(raw)
    except ValueError:
        raise NotFound("Course not found") from None
    course = await repos.courses.get_by_id(course_id)
    if course is None:
        raise NotFound("Course not found")
    return course


def _already_enrolled(existing: Enrollment | None) -> Conflict:
    body = {"enrollment": enrollment_body(existing)} if existing is not None else None
    return Conflict("Already enrolled", existing=body)


async def _notify_author(repos: Repos, course: Course) -> None:
    await notify(
        repos.notifications,
        user_id=course.author_id,
        type="enrollment",
        title="New enrollment",
        message=f'A student enrolled in "{course.title}".',
        link=f"/author/courses/{course.slug}",
    )


async def complete_module(
    repos: Repos, principal: Principal, module_id: UUID
) -> CompletionResult:
    module = await repos.courses.get_module(module_id)
    if module is None:
        raise NotFound("Module not found")

    user_id = UUID(principal.user_id)
    enrollment = await repos.enrollments.get(user_id, module.course_id, for_update=True)
    if enrollment is None:
        raise Forbidden("Not enrolled")

    fresh = await repos.enrollments.add_completion(
        ModuleCompletion(user_id=user_id, module_id=module.id)
    )
    MODULE_COMPLETIONS.labels(result="new" if fresh else "repeat").inc()

    modules = await repos.courses.list_modules(module.course_id)
    done = await repos.enrollments.count_completions(user_id, (m.id for m in modules))
    updated = enrollment.recomputed(done, len(modules), datetime.now(UTC))
    await repos.enrollments.save_progress(updated)

    if updated.is_complete and enrollment.completed_at is None:
        COURSES_COMPLETED.inc()
        logger.info(
            "User %s completed course=%s",
            principal.user_id,
            module.course_id,
            extra={"user_id": principal.user_id, "course_id": str(module.course_id)},
        )
    return CompletionResult(progress=updated.progress, completed=updated.is_complete)


async def list_enrollments(
    repos: Repos, principal: Principal
) -> list[tuple[Enrollment, Course | None]]:
    enrollments = await repos.enrollments.list_for_user(UUID(principal.user_id))
    courses = await repos.courses.get_many(e.course_id for e in enrollments)
    return [(e, courses.get(e.course_id)) for e in enrollments]
