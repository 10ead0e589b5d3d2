"""PostgreSQL implementation of ResetTokenRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.tables import PasswordResetTokenRow
from coursehub.models.password_reset import PasswordResetToken


class PgResetTokenRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, token: PasswordResetToken) -> None:
        self._session.add(
            PasswordResetTokenRow(
                id=token.id,
                token_hash=token.token_hash,
                user_id=token.user_id,
                expires_at=token.expires_at,
                used=token.used,
            )
        )
        await self._session.flush()

    async def get_by_hash(self, token_hash: str) -> PasswordResetToken | None:
        stmt = select(PasswordResetTokenRow).where(
            PasswordResetTokenRow.token_hash == token_hash
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return PasswordResetToken(
            id=row.id,
            token_hash=row.token_hash,
            user_id=row.user_id,
            expires_at=row.expires_at,
            used=row.used,
        )

    async def consume(self, token_id: UUID) -> bool:
        # conditional update: only one concurrent reset can flip the flag
        stmt = (
            update(PasswordResetTokenRow)
            .where(
                PasswordResetTokenRow.id == token_id,
                PasswordResetTokenRow.used.is_(False),
            )
            .values(used=True)
        )
        return (await self._session.execute(stmt)).rowcount == 1
