from __future__ import annotations

from decimal import Decimal
from typing import Protocol
from uuid import UUID

from coursehub.models.payout import Payout


class PayoutRepo(Protocol):
    async def add(self, payout: Payout) -> None: ...
    async def totals_by_author(self) -> dict[UUID, Decimal]: ...
    async def recent(self, limit: int) -> list[Payout]: ...


class InMemoryPayoutRepo:
    """Append-only: there is no update or delete."""

    def __init__(self) -> None:
        self._ledger: list[Payout] = []

    async def add(self, payout: Payout) -> None:
        self._ledger.append(payout)

    async def totals_by_author(self) -> dict[UUID, Decimal]:
        totals: dict[UUID, Decimal] = {}
        for p in self._ledger:
            totals[p.author_id] = totals.get(p.author_id, Decimal("0")) + p.amount
        return totals

    async def recent(self, limit: int) -> list[Payout]:
        # ledger order breaks paid_at ties, newest appended last
        indexed = sorted(
            enumerate(self._ledger), key=lambda ip: (ip[1].paid_at, ip[0]), reverse=True
        )
        return [p for _, p in indexed[:limit]]
