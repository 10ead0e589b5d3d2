"""Admin dashboards: platform analytics and the activity feed."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime, time, timedelta
from typing import Any

from coursehub.models.course import CourseStatus
from coursehub.repos.registry import Repos

DEFAULT_DAYS = 30
MIN_DAYS = 7
MAX_DAYS = 90
TOP_COURSES = 10

DEFAULT_ACTIVITY_LIMIT = 30
MAX_ACTIVITY_LIMIT = 100


def clamp_days(days: int | None) -> int:
    if not days:
        return DEFAULT_DAYS
    return min(max(days, MIN_DAYS), MAX_DAYS)


def window_start(days: int, now: datetime | None = None) -> datetime:
    """Midnight UTC, ``days`` days before ``now``."""
    now = now or datetime.now(UTC)
    return datetime.combine((now - timedelta(days=days)).date(), time.min, tzinfo=UTC)


async def platform_analytics(repos: Repos, days: int | None) -> dict[str, Any]:
    days = clamp_days(days)
    since = window_start(days)

    by_status = await repos.courses.count_by_status()
    stamps = await repos.enrollments.enrolled_since(since)
    per_day = Counter(ts.astimezone(UTC).date().isoformat() for ts in stamps)

    published = await repos.courses.list_published()
    enrollment_counts = await repos.enrollments.count_by_course(c.id for c in published)
    review_counts = await repos.reviews.count_by_course(c.id for c in published)
    top = sorted(published, key=lambda c: enrollment_counts.get(c.id, 0), reverse=True)

    return {
        "days": days,
        "totals": {
            "users": await repos.users.count(),
            "courses": await repos.courses.count(),
            "enrollments": await repos.enrollments.count(),
        },
        "coursesByStatus": {s.value: by_status.get(s, 0) for s in CourseStatus},
        "enrollmentsByDay": [
            {"date": day, "count": per_day[day]} for day in sorted(per_day)
        ],
        "topCourses": [
            {
                "id": str(c.id),
                "title": c.title,
                "slug": c.slug,
                "enrollments": enrollment_counts.get(c.id, 0),
                "reviews": review_counts.get(c.id, 0),
            }
            for c in top[:TOP_COURSES]
        ],
        "newUsersLastNDays": await repos.users.count(since=since),
    }


@dataclass(frozen=True, slots=True)
class Activity:
    type: str  # enrollment|user_signup|review
    date: datetime
    id: str
    message: str
    meta: dict[str, Any] = field(default_factory=dict)


def clamp_activity_limit(limit: int | None) -> int:
    if not limit or limit < 1:
        return DEFAULT_ACTIVITY_LIMIT
    return min(limit, MAX_ACTIVITY_LIMIT)


async def activity_feed(repos: Repos, limit: int | None) -> list[Activity]:
    """Newest enrollments, signups and reviews merged by timestamp."""
    limit = clamp_activity_limit(limit)
    enrollments = await repos.enrollments.recent(limit)
    signups = await repos.users.recent(limit)
    reviews = await repos.reviews.recent(limit)

    people = await repos.users.get_many(
        [e.user_id for e in enrollments] + [r.user_id for r in reviews]
    )
    courses = await repos.courses.get_many(
        [e.course_id for e in enrollments] + [r.course_id for r in reviews]
    )

    def who(user_id) -> str:
        user = people.get(user_id)
        return user.display_name if user else "Someone"

    activities: list[Activity] = []
    for e in enrollments:
        course = courses.get(e.course_id)
        title = course.title if course else ""
        activities.append(
            Activity(
                type="enrollment",
                date=e.enrolled_at,
                id=str(e.id),
                message=f'{who(e.user_id)} enrolled in "{title}"',
                meta={
                    "userId": str(e.user_id),
                    "courseId": str(e.course_id),
                    "courseSlug": course.slug if course else None,
                },
            )
        )
    for u in signups:
        activities.append(
            Activity(
                type="user_signup",
                date=u.created_at,
                id=str(u.id),
                message=f"New user: {u.display_name} ({u.role.value})",
                meta={"email": u.email},
            )
        )
    for r in reviews:
        course = courses.get(r.course_id)
        title = course.title if course else ""
        activities.append(
            Activity(
                type="review",
                date=r.created_at,
                id=str(r.id),
                message=f'{who(r.user_id)} left a {r.rating}-star review on "{title}"',
                meta={"courseSlug": course.slug if course else None, "rating": r.rating},
            )
        )

    activities.sort(key=lambda a: a.date, reverse=True)
    return activities[:limit]
