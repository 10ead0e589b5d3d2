"""Courses and their modules.

Modules live with their course: they are created, listed and removed
through the same repo, and always listed in the strict module order
``(order, created_at, insertion sequence)``.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from coursehub.models.course import Course, CourseStatus, Module


class CourseRepo(Protocol):
    async def get_by_id(self, course_id: UUID) -> Course | None: ...
    async def get_by_slug(self, slug: str) -> Course | None: ...
    async def get_many(self, course_ids: Iterable[UUID]) -> dict[UUID, Course]: ...
    async def slug_exists(self, slug: str) -> bool: ...
    async def add(self, course: Course) -> bool: ...
    async def save(self, course: Course) -> None: ...
    async def delete(self, course_id: UUID) -> None: ...
    async def search(
        self,
        *,
        status: CourseStatus | None = None,
        category: str | None = None,
        q: str = "",
        author_id: UUID | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[Course], int]: ...
    async def list_revenue_courses(self) -> list[Course]: ...
    async def list_published(self) -> list[Course]: ...
    async def count(self) -> int: ...
    async def count_by_status(self) -> dict[CourseStatus, int]: ...
    async def count_by_author(self, author_ids: Iterable[UUID]) -> dict[UUID, int]: ...

    async def add_module(self, module: Module) -> None: ...
    async def get_module(self, module_id: UUID) -> Module | None: ...
    async def save_module(self, module: Module) -> None: ...
    async def list_modules(self, course_id: UUID) -> list[Module]: ...
    async def count_modules(self, course_id: UUID) -> int: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._courses: dict[UUID, Course] = {}
        self._modules: dict[UUID, Module] = {}
        # insertion sequence breaks (order, created_at) ties
        self._module_seq: dict[UUID, int] = {}
        self._seq = itertools.count()

    async def get_by_id(self, course_id: UUID) -> Course | None:
        return self._courses.get(course_id)

    async def get_by_slug(self, slug: str) -> Course | None:
        return next((c for c in self._courses.values() if c.slug == slug), None)

    async def get_many(self, course_ids: Iterable[UUID]) -> dict[UUID, Course]:
        return {cid: self._courses[cid] for cid in set(course_ids) if cid in self._courses}

    async def slug_exists(self, slug: str) -> bool:
        return await self.get_by_slug(slug) is not None

    async def add(self, course: Course) -> bool:
        if await self.slug_exists(course.slug):
            return False
        self._courses[course.id] = course
        return True

    async def save(self, course: Course) -> None:
        if course.id not in self._courses:
            raise KeyError("course not found")
        clash = await self.get_by_slug(course.slug)
        if clash is not None and clash.id != course.id:
            raise ValueError("slug already exists")
        self._courses[course.id] = course

    async def delete(self, course_id: UUID) -> None:
        self._courses.pop(course_id, None)
        for module_id in [m.id for m in self._modules.values() if m.course_id == course_id]:
            del self._modules[module_id]
            del self._module_seq[module_id]

    async def search(
        self,
        *,
        status: CourseStatus | None = None,
        category: str | None = None,
        q: str = "",
        author_id: UUID | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[Course], int]:
        needle = q.strip().lower()
        matches = [
            c
            for c in self._courses.values()
            if (status is None or c.status == status)
            and (category is None or c.category == category)
            and (author_id is None or c.author_id == author_id)
            and (not needle or needle in c.title.lower() or needle in c.slug)
        ]
        matches.sort(key=lambda c: c.updated_at, reverse=True)
        return matches[offset : offset + limit], len(matches)

    async def list_revenue_courses(self) -> list[Course]:
        return [c for c in self._courses.values() if c.earns_revenue]

    async def list_published(self) -> list[Course]:
        return [c for c in self._courses.values() if c.is_published]

    async def count(self) -> int:
        return len(self._courses)

    async def count_by_status(self) -> dict[CourseStatus, int]:
        counts: dict[CourseStatus, int] = {}
        for c in self._courses.values():
            counts[c.status] = counts.get(c.status, 0) + 1
        return counts

    async def count_by_author(self, author_ids: Iterable[UUID]) -> dict[UUID, int]:
        wanted = set(author_ids)
        counts: dict[UUID, int] = {}
        for c in self._courses.values():
            if c.author_id in wanted:
                counts[c.author_id] = counts.get(c.author_id, 0) + 1
        return counts

    async def add_module(self, module: Module) -> None:
        self._modules[module.id] = module
        self._module_seq[module.id] = next(self._seq)

    async def get_module(self, module_id: UUID) -> Module | None:
        return self._modules.get(module_id)

    async def save_module(self, module: Module) -> None:
        if module.id not in self._modules:
            raise KeyError("module not found")
        self._modules[module.id] = module

    async def list_modules(self, course_id: UUID) -> list[Module]:
        modules = [m for m in self._modules.values() if m.course_id == course_id]
        modules.sort(key=lambda m: (m.order, m.created_at, self._module_seq[m.id]))
        return modules

    async def count_modules(self, course_id: UUID) -> int:
        return sum(1 for m in self._modules.values() if m.course_id == course_id)
