from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4


def compute_progress(completed: int, total: int) -> int:
    """Percentage of modules completed, rounded half up, 0 for empty courses."""
    if total <= 0:
        return 0
    # integer half-up rounding; float round() would bank 2.5 -> 2
    return min(100, (200 * completed + total) // (2 * total))


@dataclass(frozen=True, slots=True)
class Enrollment:
    id: UUID
    user_id: UUID
    course_id: UUID
    progress: int = 0
    enrolled_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return self.progress >= 100

    def recomputed(self, completed: int, total: int, now: datetime) -> Enrollment:
        """Return this enrollment with progress derived from module counts.

        ``completed_at`` is stamped with ``now`` whenever progress is at 100
        and is never cleared afterwards, even if the course later grows.
        """
        progress = compute_progress(completed, total)
        completed_at = now if progress >= 100 else self.completed_at
        return replace(self, progress=progress, completed_at=completed_at)

    @staticmethod
    def new(*, user_id: UUID, course_id: UUID) -> Enrollment:
        return Enrollment(id=uuid4(), user_id=user_id, course_id=course_id)


@dataclass(frozen=True, slots=True)
class ModuleCompletion:
    user_id: UUID
    module_id: UUID
    completed_at: datetime = field(default_factory=lambda: datetime.now(UTC))
