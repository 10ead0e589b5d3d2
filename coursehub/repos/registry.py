"""Per-request repository bundle.

``get_repos`` is the single FastAPI dependency that hands services their
storage. Without DATABASE_URL it yields the process-wide in-memory bundle;
otherwise it opens one AsyncSession, yields the PostgreSQL bundle built on
it, and commits on success or rolls back on error.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db import engine as db
from coursehub.repos.course_repo import CourseRepo, InMemoryCourseRepo
from coursehub.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from coursehub.repos.notification_repo import (
    InMemoryNotificationRepo,
    NotificationRepo,
)
from coursehub.repos.payout_repo import InMemoryPayoutRepo, PayoutRepo
from coursehub.repos.pg_course_repo import PgCourseRepo
from coursehub.repos.pg_enrollment_repo import PgEnrollmentRepo
from coursehub.repos.pg_notification_repo import PgNotificationRepo
from coursehub.repos.pg_payout_repo import PgPayoutRepo
from coursehub.repos.pg_reset_token_repo import PgResetTokenRepo
from coursehub.repos.pg_review_repo import PgReviewRepo
from coursehub.repos.pg_settings_repo import PgSettingsRepo
from coursehub.repos.pg_user_repo import PgUserRepo
from coursehub.repos.reset_token_repo import InMemoryResetTokenRepo, ResetTokenRepo
from coursehub.repos.review_repo import InMemoryReviewRepo, ReviewRepo
from coursehub.repos.settings_repo import InMemorySettingsRepo, SettingsRepo
from coursehub.repos.user_repo import InMemoryUserRepo, UserRepo


@dataclass(frozen=True)
class Repos:
    users: UserRepo
    courses: CourseRepo
    enrollments: EnrollmentRepo
    reviews: ReviewRepo
    payouts: PayoutRepo
    notifications: NotificationRepo
    settings: SettingsRepo
    reset_tokens: ResetTokenRepo


def memory_repos() -> Repos:
    return Repos(
        users=InMemoryUserRepo(),
        courses=InMemoryCourseRepo(),
        enrollments=InMemoryEnrollmentRepo(),
        reviews=InMemoryReviewRepo(),
        payouts=InMemoryPayoutRepo(),
        notifications=InMemoryNotificationRepo(),
        settings=InMemorySettingsRepo(),
        reset_tokens=InMemoryResetTokenRepo(),
    )


def pg_repos(session: AsyncSession) -> Repos:
    return Repos(
        users=PgUserRepo(session),
        courses=PgCourseRepo(session),
        enrollments=PgEnrollmentRepo(session),
        reviews=PgReviewRepo(session),
        payouts=PgPayoutRepo(session),
        notifications=PgNotificationRepo(session),
        settings=PgSettingsRepo(session),
        reset_tokens=PgResetTokenRepo(session),
    )


_memory = memory_repos()


def current_memory_repos() -> Repos:
    return _memory


def reset_memory_repos() -> Repos:
    """Swap in an empty in-memory bundle (tests)."""
    global _memory
    _memory = memory_repos()
    return _memory


async def get_repos() -> AsyncGenerator[Repos, None]:
    if db.async_session_factory is None:
        yield _memory
        return

    async with db.async_session_factory() as session:
        try:
            yield pg_repos(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
