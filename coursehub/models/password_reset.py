from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class PasswordResetToken:
    """Single-use reset grant. Only the SHA-256 of the token is stored."""

    id: UUID
    token_hash: str
    user_id: UUID
    expires_at: datetime
    used: bool = False

    def is_usable(self, now: datetime) -> bool:
        return not self.used and self.expires_at > now

    @staticmethod
    def new(
        *, token_hash: str, user_id: UUID, expires_at: datetime
    ) -> PasswordResetToken:
        return PasswordResetToken(
            id=uuid4(), token_hash=token_hash, user_id=user_id, expires_at=expires_at
        )
