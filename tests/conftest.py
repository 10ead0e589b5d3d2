from __future__ import annotations

import asyncio
import os
import sys
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

# Settings are read at import time: force in-memory storage and dev mode
# (reset links are returned in the response body) before coursehub loads.
os.environ.pop("DATABASE_URL", None)
os.environ["APP_ENV"] = "dev"

# Ensure repo root is on sys.path so `import coursehub` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from coursehub.main import app  # noqa: E402
from coursehub.models.content import with_defaults  # noqa: E402
from coursehub.models.course import Course, CourseStatus, Module  # noqa: E402
from coursehub.models.enrollment import Enrollment  # noqa: E402
from coursehub.models.user import Role, User  # noqa: E402
from coursehub.repos.registry import (  # noqa: E402
    Repos,
    current_memory_repos,
    reset_memory_repos,
)
from coursehub.services import auth_service, token_service  # noqa: E402


@pytest.fixture(autouse=True)
def reset_repos() -> None:
    """Every test starts from an empty in-memory store."""
    reset_memory_repos()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def repos() -> Repos:
    return current_memory_repos()


def run(coro):
    """Drive a repo coroutine from a synchronous test."""
    return asyncio.run(coro)


def mint_token(user_id: str | None = None, role: Role | str = Role.STUDENT) -> str:
    """Create a valid ES256 JWT for testing."""
    role_value = role.value if isinstance(role, Role) else role
    return token_service.create_access_token(sub=user_id or str(uuid4()), role=role_value)


def auth(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(str(user.id), user.role)}"}


# ---------------------------------------------------------------------------
# Seed helpers (write straight to the in-memory repos)
# ---------------------------------------------------------------------------


def create_user(
    role: Role = Role.STUDENT,
    *,
    email: str | None = None,
    password: str | None = None,
    name: str = "",
    username: str | None = None,
) -> User:
    tag = uuid4().hex[:8]
    user = User.new(
        email=email or f"{role.value.lower()}-{tag}@example.com",
        password_hash=auth_service.hash_password(password) if password else "x",
        name=name or f"{role.value.title()} {tag}",
        username=username or f"{role.value.lower()}_{tag}",
        role=role,
    )
    run(current_memory_repos().users.add(user))
    return user


def create_course(
    author: User,
    title: str = "Sample Course",
    *,
    status: CourseStatus = CourseStatus.PUBLISHED,
    is_paid: bool = False,
    price: str | None = None,
    category: str | None = None,
    modules: int = 0,
) -> Course:
    repos = current_memory_repos()
    slug = f"{title.lower().replace(' ', '-')}-{uuid4().hex[:6]}"
    course = Course.new(
        author_id=author.id,
        title=title,
        slug=slug,
        status=status,
        is_paid=is_paid,
        price=Decimal(price) if price is not None else None,
        category=category,
    )
    run(repos.courses.add(course))
    for i in range(modules):
        add_module(course, f"Module {i + 1}", order=i)
    return course


def add_module(course: Course, title: str = "Module", *, order: int = 0) -> Module:
    module = Module.new(
        course_id=course.id,
        title=title,
        content=with_defaults("lesson", {"text": title}),
        order=order,
    )
    run(current_memory_repos().courses.add_module(module))
    return module


def enroll(user: User, course: Course) -> Enrollment:
    enrollment = Enrollment.new(user_id=user.id, course_id=course.id)
    run(current_memory_repos().enrollments.add(enrollment))
    return enrollment


@pytest.fixture
def student() -> User:
    return create_user(Role.STUDENT)


@pytest.fixture
def author() -> User:
    return create_user(Role.AUTHOR)


@pytest.fixture
def admin() -> User:
    return create_user(Role.ADMIN)
