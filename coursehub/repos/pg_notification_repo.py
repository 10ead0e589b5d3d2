"""PostgreSQL implementation of NotificationRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.tables import NotificationRow
from coursehub.models.notification import Notification


class PgNotificationRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, notification: Notification) -> None:
        # SAVEPOINT: a failed insert must not poison the caller's transaction
        async with self._session.begin_nested():
            self._session.add(
                NotificationRow(
                    id=notification.id,
                    user_id=notification.user_id,
                    type=notification.type,
                    title=notification.title,
                    message=notification.message,
                    link=notification.link,
                    read=notification.read,
                    created_at=notification.created_at,
                )
            )

    async def list_for_user(
        self, user_id: UUID, *, limit: int, unread_only: bool
    ) -> list[Notification]:
        stmt = select(NotificationRow).where(NotificationRow.user_id == user_id)
        if unread_only:
            stmt = stmt.where(NotificationRow.read.is_(False))
        stmt = stmt.order_by(NotificationRow.created_at.desc()).limit(limit)
        return [_row_to_notification(r) for r in (await self._session.scalars(stmt)).all()]

    async def count_unread(self, user_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(NotificationRow)
            .where(NotificationRow.user_id == user_id, NotificationRow.read.is_(False))
        )
        return (await self._session.scalar(stmt)) or 0

    async def mark_read(self, user_id: UUID, notification_id: UUID) -> int:
        stmt = (
            update(NotificationRow)
            .where(
                NotificationRow.id == notification_id,
                NotificationRow.user_id == user_id,
            )
            .values(read=True)
        )
        return (await self._session.execute(stmt)).rowcount

    async def mark_all_read(self, user_id: UUID) -> int:
        stmt = (
            update(NotificationRow)
            .where(NotificationRow.user_id == user_id, NotificationRow.read.is_(False))
            .values(read=True)
        )
        return (await self._session.execute(stmt)).rowcount


def _row_to_notification(row: NotificationRow) -> Notification:
    return Notification(
        id=row.id,
        user_id=row.user_id,
        type=row.type,
        title=row.title,
        message=row.message,
        link=row.link,
        read=row.read,
        created_at=row.created_at,
    )
