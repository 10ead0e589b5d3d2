"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.tables import CourseRow, ModuleRow
from coursehub.models.course import Course, CourseLevel, CourseStatus, Module

# columns written by save(); id, author and created_at never change
_MUTABLE_COLUMNS = (
    "title",
    "slug",
    "description",
    "long_description",
    "thumbnail",
    "category",
    "duration",
    "is_paid",
    "price",
    "published_at",
    "updated_at",
)


class PgCourseRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, course_id: UUID) -> Course | None:
        row = await self._session.get(CourseRow, course_id)
        return _row_to_course(row) if row is not None else None

    async def get_by_slug(self, slug: str) -> Course | None:
        stmt = select(CourseRow).where(CourseRow.slug == slug)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_course(row) if row is not None else None

    async def get_many(self, course_ids: Iterable[UUID]) -> dict[UUID, Course]:
        ids = set(course_ids)
        if not ids:
            return {}
        stmt = select(CourseRow).where(CourseRow.id.in_(ids))
        return {r.id: _row_to_course(r) for r in (await self._session.scalars(stmt)).all()}

    async def slug_exists(self, slug: str) -> bool:
        stmt = select(CourseRow.id).where(CourseRow.slug == slug)
        return (await self._session.scalar(stmt)) is not None

    async def add(self, course: Course) -> bool:
        """Insert the course; False when its slug is already taken."""
        try:
            async with self._session.begin_nested():
                self._session.add(
                    CourseRow(
                        id=course.id,
                        author_id=course.author_id,
                        status=course.status.value,
                        level=course.level.value if course.level else None,
                        created_at=course.created_at,
                        **{col: getattr(course, col) for col in _MUTABLE_COLUMNS},
                    )
                )
        except IntegrityError:
            return False
        return True

    async def save(self, course: Course) -> None:
        values = {col: getattr(course, col) for col in _MUTABLE_COLUMNS}
        values["status"] = course.status.value
        values["level"] = course.level.value if course.level else None
        await self._session.execute(
            update(CourseRow).where(CourseRow.id == course.id).values(**values)
        )

    async def delete(self, course_id: UUID) -> None:
        # modules, enrollments, completions and reviews go by FK cascade
        await self._session.execute(delete(CourseRow).where(CourseRow.id == course_id))

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
        conditions = []
        if status is not None:
            conditions.append(CourseRow.status == status.value)
        if category is not None:
            conditions.append(CourseRow.category == category)
        if author_id is not None:
            conditions.append(CourseRow.author_id == author_id)
        if q.strip():
            pattern = f"%{q.strip()}%"
            conditions.append(
                or_(CourseRow.title.ilike(pattern), CourseRow.slug.ilike(pattern))
            )

        stmt = (
            select(CourseRow)
            .where(*conditions)
            .order_by(CourseRow.updated_at.desc())
            .limit(limit)
            .offset(offset)
        )
        rows = (await self._session.scalars(stmt)).all()
        total = await self._session.scalar(
            select(func.count()).select_from(CourseRow).where(*conditions)
        )
        return [_row_to_course(r) for r in rows], total or 0

    async def list_revenue_courses(self) -> list[Course]:
        stmt = select(CourseRow).where(
            CourseRow.status == CourseStatus.PUBLISHED.value,
            CourseRow.is_paid.is_(True),
            CourseRow.price.is_not(None),
        )
        return [_row_to_course(r) for r in (await self._session.scalars(stmt)).all()]

    async def list_published(self) -> list[Course]:
        stmt = select(CourseRow).where(CourseRow.status == CourseStatus.PUBLISHED.value)
        return [_row_to_course(r) for r in (await self._session.scalars(stmt)).all()]

    async def count(self) -> int:
        return (await self._session.scalar(select(func.count()).select_from(CourseRow))) or 0

    async def count_by_status(self) -> dict[CourseStatus, int]:
        stmt = select(CourseRow.status, func.count()).group_by(CourseRow.status)
        rows = (await self._session.execute(stmt)).all()
        return {CourseStatus(status): n for status, n in rows}

    async def count_by_author(self, author_ids: Iterable[UUID]) -> dict[UUID, int]:
        ids = set(author_ids)
        if not ids:
            return {}
        stmt = (
            select(CourseRow.author_id, func.count())
            .where(CourseRow.author_id.in_(ids))
            .group_by(CourseRow.author_id)
        )
        return {aid: n for aid, n in (await self._session.execute(stmt)).all()}

    async def add_module(self, module: Module) -> None:
        self._session.add(
            ModuleRow(
                id=module.id,
                course_id=module.course_id,
                title=module.title,
                order=module.order,
                content=module.content,
                duration=module.duration,
                created_at=module.created_at,
            )
        )
        await self._session.flush()

    async def get_module(self, module_id: UUID) -> Module | None:
        row = await self._session.get(ModuleRow, module_id)
        return _row_to_module(row) if row is not None else None

    async def save_module(self, module: Module) -> None:
        stmt = (
            update(ModuleRow)
            .where(ModuleRow.id == module.id)
            .values(
                title=module.title,
                order=module.order,
                content=module.content,
                duration=module.duration,
            )
        )
        await self._session.execute(stmt)

    async def list_modules(self, course_id: UUID) -> list[Module]:
        stmt = (
            select(ModuleRow)
            .where(ModuleRow.course_id == course_id)
            .order_by(ModuleRow.order, ModuleRow.created_at, ModuleRow.id)
        )
        return [_row_to_module(r) for r in (await self._session.scalars(stmt)).all()]

    async def count_modules(self, course_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(ModuleRow)
            .where(ModuleRow.course_id == course_id)
        )
        return (await self._session.scalar(stmt)) or 0


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        author_id=row.author_id,
        title=row.title,
        slug=row.slug,
        description=row.description,
        long_description=row.long_description,
        thumbnail=row.thumbnail,
        category=row.category,
        level=CourseLevel(row.level) if row.level else None,
        duration=row.duration,
        is_paid=row.is_paid,
        price=row.price,
        status=CourseStatus(row.status),
        published_at=row.published_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_module(row: ModuleRow) -> Module:
    return Module(
        id=row.id,
        course_id=row.course_id,
        title=row.title,
        order=row.order,
        content=dict(row.content or {}),
        duration=row.duration,
        created_at=row.created_at,
    )
