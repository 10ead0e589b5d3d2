from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime
from typing import Protocol
from uuid import UUID

from coursehub.models.user import Role, User


class UserRepo(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def get_by_username(self, username: str) -> User | None: ...
    async def get_many(self, user_ids: Iterable[UUID]) -> dict[UUID, User]: ...
    async def add(self, user: User) -> None: ...
    async def update_password_hash(self, user_id: UUID, password_hash: str) -> None: ...
    async def set_role(self, user_id: UUID, role: Role) -> User | None: ...
    async def search(
        self, *, role: Role | None, q: str, limit: int, offset: int
    ) -> tuple[list[User], int]: ...
    async def count(self, *, since: datetime | None = None) -> int: ...
    async def recent(self, limit: int) -> list[User]: ...


class InMemoryUserRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, User] = {}

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._by_id.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        return next((u for u in self._by_id.values() if u.email == email), None)

    async def get_by_username(self, username: str) -> User | None:
        return next((u for u in self._by_id.values() if u.username == username), None)

    async def get_many(self, user_ids: Iterable[UUID]) -> dict[UUID, User]:
        return {uid: self._by_id[uid] for uid in set(user_ids) if uid in self._by_id}

    async def add(self, user: User) -> None:
        if await self.get_by_email(user.email) is not None:
            raise ValueError("email already exists")
        if user.username and await self.get_by_username(user.username) is not None:
            raise ValueError("username already exists")
        self._by_id[user.id] = user

    async def update_password_hash(self, user_id: UUID, password_hash: str) -> None:
        u = self._by_id.get(user_id)
        if u is None:
            raise KeyError("user not found")
        self._by_id[user_id] = replace(u, password_hash=password_hash)

    async def set_role(self, user_id: UUID, role: Role) -> User | None:
        u = self._by_id.get(user_id)
        if u is None:
            return None
        updated = replace(u, role=role)
        self._by_id[user_id] = updated
        return updated

    async def search(
        self, *, role: Role | None, q: str, limit: int, offset: int
    ) -> tuple[list[User], int]:
        needle = q.strip().lower()
        matches = [
            u
            for u in self._by_id.values()
            if (role is None or u.role == role)
            and (not needle or needle in u.email or needle in u.name.lower())
        ]
        matches.sort(key=lambda u: u.created_at, reverse=True)
        return matches[offset : offset + limit], len(matches)

    async def count(self, *, since: datetime | None = None) -> int:
        if since is None:
            return len(self._by_id)
        return sum(1 for u in self._by_id.values() if u.created_at >= since)

    async def recent(self, limit: int) -> list[User]:
        users = sorted(self._by_id.values(), key=lambda u: u.created_at, reverse=True)
        return users[:limit]
