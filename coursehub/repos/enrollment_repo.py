"""Enrollments and the module completions that drive their progress."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime
from typing import Protocol
from uuid import UUID

from coursehub.models.enrollment import Enrollment, ModuleCompletion


class EnrollmentRepo(Protocol):
    async def get(
        self, user_id: UUID, course_id: UUID, *, for_update: bool = False
    ) -> Enrollment | None: ...
    async def add(self, enrollment: Enrollment) -> bool: ...
    async def save_progress(self, enrollment: Enrollment) -> None: ...
    async def list_for_user(self, user_id: UUID) -> list[Enrollment]: ...
    async def count(self) -> int: ...
    async def count_by_course(self, course_ids: Iterable[UUID]) -> dict[UUID, int]: ...
    async def count_by_user(self, user_ids: Iterable[UUID]) -> dict[UUID, int]: ...
    async def recent(self, limit: int) -> list[Enrollment]: ...
    async def enrolled_since(self, since: datetime) -> list[datetime]: ...
    async def delete_for_course(self, course_id: UUID) -> None: ...

    async def add_completion(self, completion: ModuleCompletion) -> bool: ...
    async def count_completions(
        self, user_id: UUID, module_ids: Iterable[UUID]
    ) -> int: ...
    async def delete_completions(self, module_ids: Iterable[UUID]) -> None: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._by_key: dict[tuple[UUID, UUID], Enrollment] = {}
        self._completions: dict[tuple[UUID, UUID], ModuleCompletion] = {}

    async def get(
        self, user_id: UUID, course_id: UUID, *, for_update: bool = False
    ) -> Enrollment | None:
        return self._by_key.get((user_id, course_id))

    async def add(self, enrollment: Enrollment) -> bool:
        key = (enrollment.user_id, enrollment.course_id)
        if key in self._by_key:
            return False
        self._by_key[key] = enrollment
        return True

    async def save_progress(self, enrollment: Enrollment) -> None:
        key = (enrollment.user_id, enrollment.course_id)
        current = self._by_key.get(key)
        if current is None:
            raise KeyError("enrollment not found")
        self._by_key[key] = replace(
            current,
            progress=enrollment.progress,
            completed_at=enrollment.completed_at,
        )

    async def list_for_user(self, user_id: UUID) -> list[Enrollment]:
        mine = [e for e in self._by_key.values() if e.user_id == user_id]
        mine.sort(key=lambda e: e.enrolled_at, reverse=True)
        return mine

    async def count(self) -> int:
        return len(self._by_key)

    async def count_by_course(self, course_ids: Iterable[UUID]) -> dict[UUID, int]:
        return _tally((e.course_id for e in self._by_key.values()), course_ids)

    async def count_by_user(self, user_ids: Iterable[UUID]) -> dict[UUID, int]:
        return _tally((e.user_id for e in self._by_key.values()), user_ids)

    async def recent(self, limit: int) -> list[Enrollment]:
        newest = sorted(self._by_key.values(), key=lambda e: e.enrolled_at, reverse=True)
        return newest[:limit]

    async def enrolled_since(self, since: datetime) -> list[datetime]:
        return [e.enrolled_at for e in self._by_key.values() if e.enrolled_at >= since]

    async def delete_for_course(self, course_id: UUID) -> None:
        for key in [k for k in self._by_key if k[1] == course_id]:
            del self._by_key[key]

    async def add_completion(self, completion: ModuleCompletion) -> bool:
        key = (completion.user_id, completion.module_id)
        if key in self._completions:
            return False
        self._completions[key] = completion
        return True

    async def count_completions(
        self, user_id: UUID, module_ids: Iterable[UUID]
    ) -> int:
        return sum(1 for mid in set(module_ids) if (user_id, mid) in self._completions)

    async def delete_completions(self, module_ids: Iterable[UUID]) -> None:
        doomed = set(module_ids)
        for key in [k for k in self._completions if k[1] in doomed]:
            del self._completions[key]


def _tally(values: Iterable[UUID], wanted: Iterable[UUID]) -> dict[UUID, int]:
    keep = set(wanted)
    counts: dict[UUID, int] = {}
    for v in values:
        if v in keep:
            counts[v] = counts.get(v, 0) + 1
    return counts
