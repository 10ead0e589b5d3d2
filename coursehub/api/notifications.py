from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel

from coursehub.api.dependencies import CurrentUser, RepoDep
from coursehub.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])

DEFAULT_LIMIT = 20
MAX_LIMIT = 50


class NotificationOut(BaseModel):
    id: str
    type: str
    title: str
    message: str
    link: str | None
    read: bool
    createdAt: datetime


class NotificationListOut(BaseModel):
    notifications: list[NotificationOut]
    unreadCount: int


class MarkReadIn(BaseModel):
    id: UUID | None = None
    markAll: bool = False


class MarkReadOut(BaseModel):
    success: bool = True
    updated: int


@router.get("", response_model=NotificationListOut)
async def list_notifications(
    principal: CurrentUser,
    repos: RepoDep,
    limit: int | None = None,
    unreadOnly: bool = False,
) -> NotificationListOut:
    size = DEFAULT_LIMIT if not limit or limit < 1 else min(limit, MAX_LIMIT)
    items, unread = await notification_service.list_notifications(
        repos.notifications, UUID(principal.user_id), limit=size, unread_only=unreadOnly
    )
    return NotificationListOut(
        notifications=[
            NotificationOut(
                id=str(n.id),
                type=n.type,
                title=n.title,
                message=n.message,
                link=n.link,
                read=n.read,
                createdAt=n.created_at,
            )
            for n in items
        ],
        unreadCount=unread,
    )


@router.patch("", response_model=MarkReadOut)
async def mark_read(payload: MarkReadIn, principal: CurrentUser, repos: RepoDep) -> MarkReadOut:
    updated = await notification_service.mark_read(
        repos.notifications,
        UUID(principal.user_id),
        notification_id=payload.id,
        mark_all=payload.markAll,
    )
    return MarkReadOut(updated=updated)
