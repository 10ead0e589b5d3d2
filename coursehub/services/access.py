"""Ownership and resource-level access checks.

Plain functions rather than FastAPI dependencies: they need both the
Principal and the loaded resource. Services call them right after the
lookup, before touching anything.
"""

from __future__ import annotations

import logging

from coursehub.core.errors import Forbidden, NotFound
from coursehub.models.course import Course
from coursehub.models.principal import Principal

logger = logging.getLogger(__name__)


def check_owner_or_admin(principal: Principal, course: Course) -> None:
    """Raise Forbidden unless the principal authored the course or is an admin."""
    if principal.can_manage(course.author_id):
        return
    logger.warning(
        "Access denied: user=%s is not owner of course=%s",
        principal.user_id,
        course.id,
        extra={"user_id": principal.user_id, "course_id": str(course.id)},
    )
    raise Forbidden()


def check_visible(principal: Principal | None, course: Course) -> None:
    """Raise NotFound for unpublished courses the caller may not see.

    Hidden courses are indistinguishable from missing ones.
    """
    if course.is_published:
        return
    if principal is not None and principal.can_manage(course.author_id):
        return
    raise NotFound("Course not found")
