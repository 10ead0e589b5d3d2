"""PostgreSQL implementation of ReviewRepo."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.tables import ReviewRow
from coursehub.models.review import Review


class PgReviewRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, course_id: UUID, user_id: UUID) -> Review | None:
        stmt = select(ReviewRow).where(
            ReviewRow.course_id == course_id, ReviewRow.user_id == user_id
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_review(row) if row is not None else None

    async def upsert(self, review: Review) -> Review:
        stmt = insert(ReviewRow).values(
            id=review.id,
            course_id=review.course_id,
            user_id=review.user_id,
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
            updated_at=review.updated_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["course_id", "user_id"],
            set_={
                "rating": stmt.excluded.rating,
                "comment": stmt.excluded.comment,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(ReviewRow)
        row = (await self._session.execute(stmt)).scalar_one()
        return _row_to_review(row)

    async def list_for_course(self, course_id: UUID) -> list[Review]:
        stmt = (
            select(ReviewRow)
            .where(ReviewRow.course_id == course_id)
            .order_by(ReviewRow.created_at.desc())
        )
        return [_row_to_review(r) for r in (await self._session.scalars(stmt)).all()]

    async def count_by_course(self, course_ids: Iterable[UUID]) -> dict[UUID, int]:
        ids = set(course_ids)
        if not ids:
            return {}
        stmt = (
            select(ReviewRow.course_id, func.count())
            .where(ReviewRow.course_id.in_(ids))
            .group_by(ReviewRow.course_id)
        )
        return {cid: n for cid, n in (await self._session.execute(stmt)).all()}

    async def recent(self, limit: int) -> list[Review]:
        stmt = select(ReviewRow).order_by(ReviewRow.created_at.desc()).limit(limit)
        return [_row_to_review(r) for r in (await self._session.scalars(stmt)).all()]

    async def delete_for_course(self, course_id: UUID) -> None:
        await self._session.execute(delete(ReviewRow).where(ReviewRow.course_id == course_id))


def _row_to_review(row: ReviewRow) -> Review:
    return Review(
        id=row.id,
        course_id=row.course_id,
        user_id=row.user_id,
        rating=row.rating,
        comment=row.comment,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
