"""Seed sample users, courses and an enrollment.

Idempotent: rows that already exist (by email or slug) are left alone.

Run with:
    DATABASE_URL=postgresql+asyncpg://... python scripts/seed.py
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from coursehub.core.config import SETTINGS
from coursehub.core.logging import setup_logging
from coursehub.db import engine as db
from coursehub.models.content import with_defaults
from coursehub.models.course import Course, CourseLevel, CourseStatus, Module
from coursehub.models.enrollment import Enrollment
from coursehub.models.user import Role, User
from coursehub.repos.registry import Repos, pg_repos
from coursehub.services.auth_service import hash_password

logger = logging.getLogger("seed")

USERS = [
    ("admin@coursehub.dev", "admin123", "Admin User", "admin", Role.ADMIN),
    ("author@coursehub.dev", "author123", "Course Author", "author", Role.AUTHOR),
    ("student@coursehub.dev", "student123", "Student User", "student", Role.STUDENT),
]

COURSES: list[dict[str, Any]] = [
    {
        "title": "Introduction to React",
        "slug": "introduction-to-react",
        "description": "Learn React from scratch: components, hooks, and state.",
        "long_description": (
            "<p>This course covers React fundamentals including JSX, components, "
            "hooks (useState, useEffect), and building a small app.</p>"
        ),
        "category": "Web Development",
        "level": CourseLevel.BEGINNER,
        "duration": 8,
        "modules": [
            ("What is React?", "React is a JavaScript library for building user interfaces.", 10),
            ("Components and JSX", "Learn how to create components and use JSX.", 15),
            ("State and Hooks", "useState and useEffect in depth.", 20),
        ],
    },
    {
        "title": "Node.js Backend Development",
        "slug": "node-js-backend",
        "description": "Build REST APIs and backends with Node.js and Express.",
        "category": "Web Development",
        "level": CourseLevel.INTERMEDIATE,
        "duration": 12,
        "modules": [
            ("Setting up Node.js", "", None),
            ("Express basics", "", None),
        ],
    },
]


async def _ensure_user(repos: Repos, email, password, name, username, role) -> User:
    user = await repos.users.get_by_email(email)
    if user is None:
        user = User.new(
            email=email,
            password_hash=hash_password(password),
            name=name,
            username=username,
            role=role,
        )
        await repos.users.add(user)
        logger.info("User created: %s (%s)", email, role.value)
    return user


async def _ensure_course(repos: Repos, author: User, fields: dict[str, Any]) -> Course:
    fields = dict(fields)
    modules = fields.pop("modules")
    course = await repos.courses.get_by_slug(fields["slug"])
    if course is None:
        course = Course.new(author_id=author.id, status=CourseStatus.PUBLISHED, **fields)
        await repos.courses.add(course)
        logger.info("Course created: %s", course.title)

    if await repos.courses.count_modules(course.id) == 0:
        for order, (title, text, duration) in enumerate(modules):
            await repos.courses.add_module(
                Module.new(
                    course_id=course.id,
                    title=title,
                    content=with_defaults("lesson", {"text": text}),
                    order=order,
                    duration=duration,
                )
            )
    return course


async def seed() -> None:
    if db.async_session_factory is None:
        raise SystemExit("DATABASE_URL is not set")

    async with db.async_session_factory() as session:
        repos = pg_repos(session)
        users = {row[-1]: await _ensure_user(repos, *row) for row in USERS}
        courses = [await _ensure_course(repos, users[Role.AUTHOR], c) for c in COURSES]

        student = users[Role.STUDENT]
        react = courses[0]
        if await repos.enrollments.get(student.id, react.id) is None:
            await repos.enrollments.add(Enrollment.new(user_id=student.id, course_id=react.id))
            logger.info("Enrollment: %s in %s", student.email, react.slug)

        await session.commit()
    await db.engine.dispose()
    logger.info("Seed completed")


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(seed())
