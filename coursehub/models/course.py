from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class CourseStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"
    REJECTED = "REJECTED"


class CourseLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w-]+", re.ASCII)
_DASH_RUN = re.compile(r"-{2,}")


def slugify(text: str) -> str:
    """URL-safe slug: lower-case, dash-separated ASCII word characters."""
    slug = _WHITESPACE.sub("-", text.lower())
    slug = _NON_WORD.sub("", slug)
    slug = _DASH_RUN.sub("-", slug).strip("-")
    return slug or "course"


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    author_id: UUID
    title: str
    slug: str
    description: str | None = None
    long_description: str | None = None
    thumbnail: str | None = None
    category: str | None = None
    level: CourseLevel | None = None
    duration: int | None = None
    is_paid: bool = False
    price: Decimal | None = None
    status: CourseStatus = CourseStatus.DRAFT
    published_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_published(self) -> bool:
        return self.status == CourseStatus.PUBLISHED

    @property
    def earns_revenue(self) -> bool:
        return self.is_published and self.is_paid and self.price is not None

    @staticmethod
    def new(
        *,
        author_id: UUID,
        title: str,
        slug: str,
        status: CourseStatus = CourseStatus.DRAFT,
        **details: Any,
    ) -> Course:
        now = datetime.now(UTC)
        return Course(
            id=uuid4(),
            author_id=author_id,
            title=title,
            slug=slug,
            status=status,
            published_at=now if status == CourseStatus.PUBLISHED else None,
            created_at=now,
            updated_at=now,
            **details,
        )


@dataclass(frozen=True, slots=True)
class Module:
    id: UUID
    course_id: UUID
    title: str
    order: int = 0
    content: dict[str, Any] = field(default_factory=dict)
    duration: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @staticmethod
    def new(
        *,
        course_id: UUID,
        title: str,
        content: dict[str, Any],
        order: int = 0,
        duration: int | None = None,
    ) -> Module:
        return Module(
            id=uuid4(),
            course_id=course_id,
            title=title,
            order=order,
            content=content,
            duration=duration,
        )
