from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from coursehub.core.errors import NotFound, ValidationFailed
from coursehub.models.principal import Principal
from coursehub.models.user import Role, User
from coursehub.repos.registry import Repos

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 20
MAX_PAGE = 100


@dataclass(frozen=True, slots=True)
class UserListing:
    user: User
    courses_authored: int
    enrollments: int


async def list_users(
    repos: Repos, *, role: Role | None, q: str, limit: int, offset: int
) -> tuple[list[UserListing], int]:
    users, total = await repos.users.search(role=role, q=q, limit=limit, offset=offset)
    ids = [u.id for u in users]
    authored = await repos.courses.count_by_author(ids)
    enrolled = await repos.enrollments.count_by_user(ids)
    return [
        UserListing(
            user=u,
            courses_authored=authored.get(u.id, 0),
            enrollments=enrolled.get(u.id, 0),
        )
        for u in users
    ], total


async def set_role(
    repos: Repos, principal: Principal, user_id: UUID, raw_role: str | None
) -> User:
    """Change a user's role. Takes effect at the user's next login."""
    try:
        role = Role(raw_role)
    except ValueError:
        raise ValidationFailed("role must be one of STUDENT, AUTHOR, ADMIN") from None

    user = await repos.users.set_role(user_id, role)
    if user is None:
        raise NotFound("User not found")
    logger.info(
        "Role of user=%s set to %s by admin=%s",
        user_id,
        role.value,
        principal.user_id,
        extra={"user_id": principal.user_id},
    )
    return user


async def get_profile(repos: Repos, principal: Principal) -> User:
    user = await repos.users.get_by_id(UUID(principal.user_id))
    if user is None:
        raise NotFound("User not found")
    return user
