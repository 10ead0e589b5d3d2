"""Response shapes shared by several routers.

Field names are the JSON names (camelCase). Request bodies stay beside
the router that accepts them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from coursehub.models.content import content_view
from coursehub.models.course import Course, Module
from coursehub.models.user import User
from coursehub.services.course_service import CourseCard


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    username: str | None
    role: str
    createdAt: datetime


class AuthorOut(BaseModel):
    id: str
    name: str
    username: str | None


class CourseOut(BaseModel):
    id: str
    authorId: str
    title: str
    slug: str
    description: str | None
    longDescription: str | None
    thumbnail: str | None
    category: str | None
    level: str | None
    duration: int | None
    isPaid: bool
    price: float | None
    status: str
    publishedAt: datetime | None
    createdAt: datetime
    updatedAt: datetime
    author: AuthorOut | None = None
    enrollmentCount: int | None = None
    reviewCount: int | None = None


class ModuleOut(BaseModel):
    id: str
    courseId: str
    title: str
    order: int
    content: dict[str, Any]
    duration: int | None
    createdAt: datetime


def user_out(user: User) -> UserOut:
    return UserOut(
        id=str(user.id),
        email=user.email,
        name=user.name,
        username=user.username,
        role=user.role.value,
        createdAt=user.created_at,
    )


def author_out(user: User | None) -> AuthorOut | None:
    if user is None:
        return None
    return AuthorOut(id=str(user.id), name=user.display_name, username=user.username)


def course_out(course: Course) -> CourseOut:
    return CourseOut(
        id=str(course.id),
        authorId=str(course.author_id),
        title=course.title,
        slug=course.slug,
        description=course.description,
        longDescription=course.long_description,
        thumbnail=course.thumbnail,
        category=course.category,
        level=course.level.value if course.level else None,
        duration=course.duration,
        isPaid=course.is_paid,
        price=float(course.price) if course.price is not None else None,
        status=course.status.value,
        publishedAt=course.published_at,
        createdAt=course.created_at,
        updatedAt=course.updated_at,
    )


def card_out(card: CourseCard) -> CourseOut:
    out = course_out(card.course)
    out.author = author_out(card.author)
    out.enrollmentCount = card.enrollment_count
    out.reviewCount = card.review_count
    return out


def module_out(module: Module) -> ModuleOut:
    return ModuleOut(
        id=str(module.id),
        courseId=str(module.course_id),
        title=module.title,
        order=module.order,
        content=content_view(module.content),
        duration=module.duration,
        createdAt=module.created_at,
    )
