from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any
from uuid import UUID

from coursehub.core.errors import NotFound
from coursehub.models.content import normalize_type, with_defaults
from coursehub.models.course import Course, Module
from coursehub.models.principal import Principal
from coursehub.repos.registry import Repos
from coursehub.services.access import check_owner_or_admin
from coursehub.services.course_service import get_manageable_course

logger = logging.getLogger(__name__)


async def add_module(
    repos: Repos,
    principal: Principal,
    slug: str,
    *,
    title: str,
    module_type: str = "lesson",
    content: dict[str, Any] | None = None,
    order: int = 0,
    duration: int | None = None,
) -> Module:
    course = await get_manageable_course(repos, principal, slug)
    module = Module.new(
        course_id=course.id,
        title=title,
        content=with_defaults(normalize_type(module_type), content),
        order=order,
        duration=duration,
    )
    await repos.courses.add_module(module)
    logger.info(
        "Module added to course=%s type=%s order=%d",
        course.slug,
        module.content["type"],
        module.order,
        extra={"user_id": principal.user_id, "course_id": str(course.id)},
    )
    return module


async def _load_managed(
    repos: Repos, principal: Principal, module_id: UUID
) -> tuple[Module, Course]:
    module = await repos.courses.get_module(module_id)
    if module is None:
        raise NotFound("Module not found")
    course = await repos.courses.get_by_id(module.course_id)
    if course is None:
        raise NotFound("Module not found")
    check_owner_or_admin(principal, course)
    return module, course


async def get_module(repos: Repos, principal: Principal, module_id: UUID) -> Module:
    module, _ = await _load_managed(repos, principal, module_id)
    return module


async def update_module(
    repos: Repos, principal: Principal, module_id: UUID, changes: dict[str, Any]
) -> Module:
    """Partial update. Replacement content without a ``type`` keeps the old one."""
    module, _ = await _load_managed(repos, principal, module_id)
    changes = dict(changes)
    if "content" in changes:
        content = dict(changes["content"] or {})
        content.setdefault("type", module.content.get("type", "lesson"))
        changes["content"] = content

    updated = replace(module, **changes)
    await repos.courses.save_module(updated)
    return updated
