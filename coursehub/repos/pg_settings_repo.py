"""PostgreSQL implementation of SettingsRepo."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.tables import SettingRow


class PgSettingsRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_many(self, keys: Iterable[str]) -> dict[str, str]:
        stmt = select(SettingRow).where(SettingRow.key.in_(list(keys)))
        return {r.key: r.value for r in (await self._session.scalars(stmt)).all()}

    async def put(self, key: str, value: str) -> None:
        stmt = insert(SettingRow).values(key=key, value=value)
        stmt = stmt.on_conflict_do_update(
            index_elements=["key"], set_={"value": stmt.excluded.value}
        )
        await self._session.execute(stmt)
