from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from coursehub.models.review import Review


class ReviewRepo(Protocol):
    async def get(self, course_id: UUID, user_id: UUID) -> Review | None: ...
    async def upsert(self, review: Review) -> Review: ...
    async def list_for_course(self, course_id: UUID) -> list[Review]: ...
    async def count_by_course(self, course_ids: Iterable[UUID]) -> dict[UUID, int]: ...
    async def recent(self, limit: int) -> list[Review]: ...
    async def delete_for_course(self, course_id: UUID) -> None: ...


class InMemoryReviewRepo:
    def __init__(self) -> None:
        self._by_key: dict[tuple[UUID, UUID], Review] = {}

    async def get(self, course_id: UUID, user_id: UUID) -> Review | None:
        return self._by_key.get((course_id, user_id))

    async def upsert(self, review: Review) -> Review:
        """Insert, or overwrite the (course, user) review keeping its id."""
        key = (review.course_id, review.user_id)
        existing = self._by_key.get(key)
        if existing is not None:
            review = Review(
                id=existing.id,
                course_id=review.course_id,
                user_id=review.user_id,
                rating=review.rating,
                comment=review.comment,
                created_at=existing.created_at,
                updated_at=review.updated_at,
            )
        self._by_key[key] = review
        return review

    async def list_for_course(self, course_id: UUID) -> list[Review]:
        reviews = [r for r in self._by_key.values() if r.course_id == course_id]
        reviews.sort(key=lambda r: r.created_at, reverse=True)
        return reviews

    async def count_by_course(self, course_ids: Iterable[UUID]) -> dict[UUID, int]:
        wanted = set(course_ids)
        counts: dict[UUID, int] = {}
        for r in self._by_key.values():
            if r.course_id in wanted:
                counts[r.course_id] = counts.get(r.course_id, 0) + 1
        return counts

    async def recent(self, limit: int) -> list[Review]:
        newest = sorted(self._by_key.values(), key=lambda r: r.created_at, reverse=True)
        return newest[:limit]

    async def delete_for_course(self, course_id: UUID) -> None:
        for key in [k for k in self._by_key if k[0] == course_id]:
            del self._by_key[key]
