from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from coursehub.models.notification import Notification


class NotificationRepo(Protocol):
    async def add(self, notification: Notification) -> None: ...
    async def list_for_user(
        self, user_id: UUID, *, limit: int, unread_only: bool
    ) -> list[Notification]: ...
    async def count_unread(self, user_id: UUID) -> int: ...
    async def mark_read(self, user_id: UUID, notification_id: UUID) -> int: ...
    async def mark_all_read(self, user_id: UUID) -> int: ...


class InMemoryNotificationRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Notification] = {}

    async def add(self, notification: Notification) -> None:
        self._by_id[notification.id] = notification

    async def list_for_user(
        self, user_id: UUID, *, limit: int, unread_only: bool
    ) -> list[Notification]:
        mine = [
            n
            for n in self._by_id.values()
            if n.user_id == user_id and not (unread_only and n.read)
        ]
        mine.sort(key=lambda n: n.created_at, reverse=True)
        return mine[:limit]

    async def count_unread(self, user_id: UUID) -> int:
        return sum(1 for n in self._by_id.values() if n.user_id == user_id and not n.read)

    async def mark_read(self, user_id: UUID, notification_id: UUID) -> int:
        n = self._by_id.get(notification_id)
        # other users' notifications are silently out of reach
        if n is None or n.user_id != user_id:
            return 0
        self._by_id[n.id] = replace(n, read=True)
        return 1

    async def mark_all_read(self, user_id: UUID) -> int:
        changed = 0
        for n in list(self._by_id.values()):
            if n.user_id == user_id and not n.read:
                self._by_id[n.id] = replace(n, read=True)
                changed += 1
        return changed
