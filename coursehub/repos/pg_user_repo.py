"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.tables import UserRow
from coursehub.models.user import Role, User


class PgUserRepo:
    """Satisfies the UserRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        row = await self._session.get(UserRow, user_id)
        return _row_to_user(row) if row is not None else None

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(UserRow).where(UserRow.email == email.strip().lower())
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_user(row) if row is not None else None

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(UserRow).where(UserRow.username == username)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_user(row) if row is not None else None

    async def get_many(self, user_ids: Iterable[UUID]) -> dict[UUID, User]:
        ids = set(user_ids)
        if not ids:
            return {}
        rows = (await self._session.scalars(select(UserRow).where(UserRow.id.in_(ids)))).all()
        return {row.id: _row_to_user(row) for row in rows}

    async def add(self, user: User) -> None:
        self._session.add(
            UserRow(
                id=user.id,
                email=user.email,
                username=user.username,
                password_hash=user.password_hash,
                name=user.name,
                role=user.role.value,
                created_at=user.created_at,
            )
        )
        await self._session.flush()

    async def update_password_hash(self, user_id: UUID, password_hash: str) -> None:
        stmt = (
            update(UserRow)
            .where(UserRow.id == user_id)
            .values(password_hash=password_hash)
        )
        await self._session.execute(stmt)

    async def set_role(self, user_id: UUID, role: Role) -> User | None:
        stmt = (
            update(UserRow)
            .where(UserRow.id == user_id)
            .values(role=role.value)
            .returning(UserRow)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_user(row) if row is not None else None

    async def search(
        self, *, role: Role | None, q: str, limit: int, offset: int
    ) -> tuple[list[User], int]:
        conditions = []
        if role is not None:
            conditions.append(UserRow.role == role.value)
        if q.strip():
            pattern = f"%{q.strip()}%"
            conditions.append(
                or_(UserRow.email.ilike(pattern), UserRow.name.ilike(pattern))
            )

        stmt = (
            select(UserRow)
            .where(*conditions)
            .order_by(UserRow.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        rows = (await self._session.scalars(stmt)).all()
        total = await self._session.scalar(
            select(func.count()).select_from(UserRow).where(*conditions)
        )
        return [_row_to_user(r) for r in rows], total or 0

    async def count(self, *, since: datetime | None = None) -> int:
        stmt = select(func.count()).select_from(UserRow)
        if since is not None:
            stmt = stmt.where(UserRow.created_at >= since)
        return (await self._session.scalar(stmt)) or 0

    async def recent(self, limit: int) -> list[User]:
        stmt = select(UserRow).order_by(UserRow.created_at.desc()).limit(limit)
        return [_row_to_user(r) for r in (await self._session.scalars(stmt)).all()]


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        name=row.name or "",
        username=row.username,
        role=Role(row.role),
        created_at=row.created_at,
    )
