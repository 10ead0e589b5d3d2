from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from coursehub.models.password_reset import PasswordResetToken


class ResetTokenRepo(Protocol):
    async def add(self, token: PasswordResetToken) -> None: ...
    async def get_by_hash(self, token_hash: str) -> PasswordResetToken | None: ...
    async def consume(self, token_id: UUID) -> bool: ...


class InMemoryResetTokenRepo:
    def __init__(self) -> None:
        self._by_hash: dict[str, PasswordResetToken] = {}

    async def add(self, token: PasswordResetToken) -> None:
        self._by_hash[token.token_hash] = token

    async def get_by_hash(self, token_hash: str) -> PasswordResetToken | None:
        return self._by_hash.get(token_hash)

    async def consume(self, token_id: UUID) -> bool:
        """Flip ``used`` once. False if already used or unknown."""
        for token in self._by_hash.values():
            if token.id == token_id:
                if token.used:
                    return False
                self._by_hash[token.token_hash] = replace(token, used=True)
                return True
        return False
