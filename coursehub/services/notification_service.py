from __future__ import annotations

import logging
from uuid import UUID

from coursehub.core.errors import ValidationFailed
from coursehub.core.metrics import NOTIFICATION_FAILURES
from coursehub.models.notification import Notification
from coursehub.repos.notification_repo import NotificationRepo

logger = logging.getLogger(__name__)


async def notify(
    repo: NotificationRepo,
    *,
    user_id: UUID,
    type: str,
    title: str,
    message: str,
    link: str | None = None,
) -> Notification | None:
    """Best-effort delivery.

    A failure is logged and counted but never propagates.
    """
    notification = Notification.new(
        user_id=user_id, type=type, title=title, message=message, link=link
    )
    try:
        await repo.add(notification)
    except Exception:
        NOTIFICATION_FAILURES.labels(type=type).inc()
        logger.exception(
            "Failed to store %s notification for user=%s",
            type,
            user_id,
            extra={"user_id": str(user_id)},
        )
        return None
    return notification


async def list_notifications(
    repo: NotificationRepo, user_id: UUID, *, limit: int, unread_only: bool
) -> tuple[list[Notification], int]:
    items = await repo.list_for_user(user_id, limit=limit, unread_only=unread_only)
    return items, await repo.count_unread(user_id)


async def mark_read(
    repo: NotificationRepo,
    user_id: UUID,
    *,
    notification_id: UUID | None,
    mark_all: bool,
) -> int:
    if mark_all:
        return await repo.mark_all_read(user_id)
    if notification_id is not None:
        return await repo.mark_read(user_id, notification_id)
    raise ValidationFailed("id or markAll required")
