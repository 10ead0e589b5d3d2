from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Notification:
    id: UUID
    user_id: UUID
    type: str  # enrollment|...
    title: str
    message: str
    link: str | None = None
    read: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @staticmethod
    def new(
        *,
        user_id: UUID,
        type: str,
        title: str,
        message: str,
        link: str | None = None,
    ) -> Notification:
        return Notification(
            id=uuid4(),
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            link=link,
        )
