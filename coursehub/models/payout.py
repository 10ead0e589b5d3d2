from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Payout:
    """Append-only ledger entry: money sent to an author."""

    id: UUID
    author_id: UUID
    amount: Decimal
    note: str | None = None
    status: str = "completed"
    paid_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @staticmethod
    def new(*, author_id: UUID, amount: Decimal, note: str | None = None) -> Payout:
        return Payout(id=uuid4(), author_id=author_id, amount=amount, note=note)
