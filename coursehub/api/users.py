from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel

from coursehub.api.dependencies import AdminUser, RepoDep
from coursehub.api.schemas import UserOut, user_out
from coursehub.models.user import Role
from coursehub.services import users_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


class UserCountsOut(BaseModel):
    coursesAuthored: int
    enrollments: int


class UserRowOut(BaseModel):
    id: str
    email: str
    name: str
    username: str | None
    role: str
    createdAt: datetime
    counts: UserCountsOut


class UserListOut(BaseModel):
    users: list[UserRowOut]
    total: int


class RoleIn(BaseModel):
    role: str | None = None


@router.get("", response_model=UserListOut)
async def list_users(
    principal: AdminUser,
    repos: RepoDep,
    role: str | None = None,
    q: str = "",
    limit: int | None = None,
    offset: int | None = None,
) -> UserListOut:
    logger.info("Admin user list requested by user=%s", principal.user_id)
    try:
        role_filter = Role(role) if role else None
    except ValueError:
        role_filter = None
    size = (
        users_service.DEFAULT_PAGE
        if not limit or limit < 1
        else min(limit, users_service.MAX_PAGE)
    )
    rows, total = await users_service.list_users(
        repos, role=role_filter, q=q, limit=size, offset=max(offset or 0, 0)
    )
    return UserListOut(
        users=[
            UserRowOut(
                **user_out(r.user).model_dump(),
                counts=UserCountsOut(
                    coursesAuthored=r.courses_authored, enrollments=r.enrollments
                ),
            )
            for r in rows
        ],
        total=total,
    )


@router.patch("/{user_id}/role", response_model=UserOut)
async def set_role(
    user_id: UUID, payload: RoleIn, principal: AdminUser, repos: RepoDep
) -> UserOut:
    user = await users_service.set_role(repos, principal, user_id, payload.role)
    return user_out(user)
