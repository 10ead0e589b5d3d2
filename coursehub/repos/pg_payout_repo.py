"""PostgreSQL implementation of PayoutRepo."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.tables import PayoutRow
from coursehub.models.payout import Payout


class PgPayoutRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, payout: Payout) -> None:
        self._session.add(
            PayoutRow(
                id=payout.id,
                author_id=payout.author_id,
                amount=payout.amount,
                note=payout.note,
                status=payout.status,
                paid_at=payout.paid_at,
            )
        )
        await self._session.flush()

    async def totals_by_author(self) -> dict[UUID, Decimal]:
        stmt = select(PayoutRow.author_id, func.sum(PayoutRow.amount)).group_by(
            PayoutRow.author_id
        )
        return {aid: total for aid, total in (await self._session.execute(stmt)).all()}

    async def recent(self, limit: int) -> list[Payout]:
        stmt = select(PayoutRow).order_by(PayoutRow.paid_at.desc()).limit(limit)
        return [
            Payout(
                id=r.id,
                author_id=r.author_id,
                amount=r.amount,
                note=r.note,
                status=r.status,
                paid_at=r.paid_at,
            )
            for r in (await self._session.scalars(stmt)).all()
        ]
