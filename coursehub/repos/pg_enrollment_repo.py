"""PostgreSQL implementation of EnrollmentRepo."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.tables import EnrollmentRow, ModuleCompletionRow
from coursehub.models.enrollment import Enrollment, ModuleCompletion


class PgEnrollmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(
        self, user_id: UUID, course_id: UUID, *, for_update: bool = False
    ) -> Enrollment | None:
        stmt = select(EnrollmentRow).where(
            EnrollmentRow.user_id == user_id, EnrollmentRow.course_id == course_id
        )
        if for_update:
            # serializes concurrent progress recomputation for one enrollment
            stmt = stmt.with_for_update()
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_enrollment(row) if row is not None else None

    async def add(self, enrollment: Enrollment) -> bool:
        """Insert the enrollment; False when the pair is already enrolled."""
        try:
            async with self._session.begin_nested():
                self._session.add(
                    EnrollmentRow(
                        id=enrollment.id,
                        user_id=enrollment.user_id,
                        course_id=enrollment.course_id,
                        progress=enrollment.progress,
                        enrolled_at=enrollment.enrolled_at,
                        completed_at=enrollment.completed_at,
                    )
                )
        except IntegrityError:
            return False
        return True

    async def save_progress(self, enrollment: Enrollment) -> None:
        stmt = (
            update(EnrollmentRow)
            .where(EnrollmentRow.id == enrollment.id)
            .values(progress=enrollment.progress, completed_at=enrollment.completed_at)
        )
        await self._session.execute(stmt)

    async def list_for_user(self, user_id: UUID) -> list[Enrollment]:
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.user_id == user_id)
            .order_by(EnrollmentRow.enrolled_at.desc())
        )
        return [_row_to_enrollment(r) for r in (await self._session.scalars(stmt)).all()]

    async def count(self) -> int:
        stmt = select(func.count()).select_from(EnrollmentRow)
        return (await self._session.scalar(stmt)) or 0

    async def count_by_course(self, course_ids: Iterable[UUID]) -> dict[UUID, int]:
        return await self._count_grouped(EnrollmentRow.course_id, course_ids)

    async def count_by_user(self, user_ids: Iterable[UUID]) -> dict[UUID, int]:
        return await self._count_grouped(EnrollmentRow.user_id, user_ids)

    async def _count_grouped(self, column, ids: Iterable[UUID]) -> dict[UUID, int]:
        wanted = set(ids)
        if not wanted:
            return {}
        stmt = select(column, func.count()).where(column.in_(wanted)).group_by(column)
        return {key: n for key, n in (await self._session.execute(stmt)).all()}

    async def recent(self, limit: int) -> list[Enrollment]:
        stmt = select(EnrollmentRow).order_by(EnrollmentRow.enrolled_at.desc()).limit(limit)
        return [_row_to_enrollment(r) for r in (await self._session.scalars(stmt)).all()]

    async def enrolled_since(self, since: datetime) -> list[datetime]:
        stmt = select(EnrollmentRow.enrolled_at).where(EnrollmentRow.enrolled_at >= since)
        return list((await self._session.scalars(stmt)).all())

    async def delete_for_course(self, course_id: UUID) -> None:
        await self._session.execute(
            delete(EnrollmentRow).where(EnrollmentRow.course_id == course_id)
        )

    async def add_completion(self, completion: ModuleCompletion) -> bool:
        stmt = (
            insert(ModuleCompletionRow)
            .values(
                user_id=completion.user_id,
                module_id=completion.module_id,
                completed_at=completion.completed_at,
            )
            .on_conflict_do_nothing(index_elements=["user_id", "module_id"])
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def count_completions(
        self, user_id: UUID, module_ids: Iterable[UUID]
    ) -> int:
        ids = set(module_ids)
        if not ids:
            return 0
        stmt = (
            select(func.count())
            .select_from(ModuleCompletionRow)
            .where(
                ModuleCompletionRow.user_id == user_id,
                ModuleCompletionRow.module_id.in_(ids),
            )
        )
        return (await self._session.scalar(stmt)) or 0

    async def delete_completions(self, module_ids: Iterable[UUID]) -> None:
        ids = set(module_ids)
        if ids:
            await self._session.execute(
                delete(ModuleCompletionRow).where(ModuleCompletionRow.module_id.in_(ids))
            )


def _row_to_enrollment(row: EnrollmentRow) -> Enrollment:
    return Enrollment(
        id=row.id,
        user_id=row.user_id,
        course_id=row.course_id,
        progress=row.progress,
        enrolled_at=row.enrolled_at,
        completed_at=row.completed_at,
    )
