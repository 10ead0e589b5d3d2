"""Course catalogue, authoring and moderation endpoints."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from fastapi import APIRouter, status
from pydantic import BaseModel, Field, field_validator

from coursehub.api.dependencies import (
    AdminUser,
    AuthorUser,
    CurrentUser,
    MaybeUser,
    RepoDep,
)
from coursehub.api.schemas import (
    AuthorOut,
    CourseOut,
    ModuleOut,
    author_out,
    card_out,
    course_out,
    module_out,
)
from coursehub.models.course import CourseLevel, CourseStatus
from coursehub.models.money import MAX_AMOUNT, to_cents
from coursehub.models.review import MAX_RATING, MIN_RATING
from coursehub.services import course_service, module_service, review_service

router = APIRouter(tags=["courses"])

PUBLIC_PAGE, PUBLIC_MAX = 20, 50
AUTHOR_PAGE, AUTHOR_MAX = 50, 100


# --- Request / Response schemas -------------------------------------------


class CourseFields(BaseModel):
    description: str | None = None
    longDescription: str | None = None
    thumbnail: str | None = None
    isPaid: bool | None = None
    price: float | None = Field(default=None, ge=0, le=float(MAX_AMOUNT))
    category: str | None = None
    level: Literal["beginner", "intermediate", "advanced"] | None = None
    duration: int | None = Field(default=None, ge=0)

    @field_validator("thumbnail")
    @classmethod
    def _thumbnail_is_url(cls, v: str | None) -> str | None:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("Invalid url")
        return v


class CourseIn(CourseFields):
    title: str = Field(min_length=1)
    isPaid: bool = False
    authorId: UUID | None = None


class CoursePatch(CourseFields):
    title: str | None = Field(default=None, min_length=1)


class ModuleIn(BaseModel):
    title: str = Field(min_length=1)
    type: Literal["lesson", "quiz", "video", "feedback"] = "lesson"
    content: dict[str, Any] | None = None
    order: int = Field(default=0, ge=0)
    duration: int | None = Field(default=None, ge=0)


class StatusIn(BaseModel):
    status: str | None = None


class ReviewIn(BaseModel):
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)
    comment: str | None = None


class CourseListOut(BaseModel):
    courses: list[CourseOut]
    total: int


class CourseDetailOut(CourseOut):
    modules: list[ModuleOut]


class ReviewOut(BaseModel):
    id: str
    courseId: str
    userId: str
    rating: int
    comment: str | None
    createdAt: datetime
    updatedAt: datetime
    user: AuthorOut | None = None


class ReviewListOut(BaseModel):
    reviews: list[ReviewOut]
    averageRating: float
    total: int


class DeletedOut(BaseModel):
    success: bool = True


_COURSE_FIELDS = {
    "title": "title",
    "description": "description",
    "longDescription": "long_description",
    "thumbnail": "thumbnail",
    "isPaid": "is_paid",
    "price": "price",
    "category": "category",
    "level": "level",
    "duration": "duration",
}


def _course_changes(body: dict[str, Any]) -> dict[str, Any]:
    """JSON field names to domain field names, with domain value types."""
    changes = {_COURSE_FIELDS[k]: v for k, v in body.items() if k in _COURSE_FIELDS}
    if "price" in changes and changes["price"] is not None:
        changes["price"] = to_cents(Decimal(str(changes["price"])))
    if changes.get("level") is not None:
        changes["level"] = CourseLevel(changes["level"])
    if "thumbnail" in changes:
        changes["thumbnail"] = changes["thumbnail"] or None
    if changes.get("is_paid") is None:
        changes.pop("is_paid", None)
    return changes


def _parse_status(raw: str | None) -> CourseStatus | None:
    try:
        return CourseStatus(raw) if raw else None
    except ValueError:
        return None


def _page(limit: int | None, offset: int | None, default: int, cap: int) -> tuple[int, int]:
    size = default if not limit or limit < 1 else min(limit, cap)
    return size, max(offset or 0, 0)


def _review_out(review, user) -> ReviewOut:
    return ReviewOut(
        id=str(review.id),
        courseId=str(review.course_id),
        userId=str(review.user_id),
        rating=review.rating,
        comment=review.comment,
        createdAt=review.created_at,
        updatedAt=review.updated_at,
        user=author_out(user),
    )


# --- Catalogue ------------------------------------------------------------


@router.get("/courses", response_model=CourseListOut)
async def list_courses(
    repos: RepoDep,
    principal: MaybeUser,
    status: str | None = None,
    category: str | None = None,
    q: str = "",
    limit: int | None = None,
    offset: int | None = None,
) -> CourseListOut:
    size, skip = _page(limit, offset, PUBLIC_PAGE, PUBLIC_MAX)
    cards, total = await course_service.list_courses(
        repos,
        principal,
        status=_parse_status(status),
        category=category or None,
        q=q,
        limit=size,
        offset=skip,
    )
    return CourseListOut(courses=[card_out(c) for c in cards], total=total)


@router.post("/courses", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(payload: CourseIn, principal: AuthorUser, repos: RepoDep) -> CourseOut:
    details = _course_changes(payload.model_dump(exclude={"title", "authorId"}))
    course = await course_service.create_course(
        repos,
        principal,
        title=payload.title,
        author_id=payload.authorId,
        **details,
    )
    return course_out(course)


@router.get("/courses/{slug}", response_model=CourseDetailOut)
async def get_course(slug: str, repos: RepoDep, principal: MaybeUser) -> CourseDetailOut:
    detail = await course_service.get_course_detail(repos, principal, slug)
    return CourseDetailOut(
        **card_out(detail.card).model_dump(),
        modules=[module_out(m) for m in detail.modules],
    )


@router.patch("/courses/{slug}", response_model=CourseOut)
async def update_course(
    slug: str, payload: CoursePatch, principal: CurrentUser, repos: RepoDep
) -> CourseOut:
    changes = _course_changes(payload.model_dump(exclude_unset=True))
    return course_out(await course_service.update_course(repos, principal, slug, changes))


@router.delete("/courses/{slug}", response_model=DeletedOut)
async def delete_course(slug: str, principal: CurrentUser, repos: RepoDep) -> DeletedOut:
    await course_service.delete_course(repos, principal, slug)
    return DeletedOut()


@router.post(
    "/courses/{slug}/modules",
    response_model=ModuleOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_module(
    slug: str, payload: ModuleIn, principal: CurrentUser, repos: RepoDep
) -> ModuleOut:
    module = await module_service.add_module(
        repos,
        principal,
        slug,
        title=payload.title,
        module_type=payload.type,
        content=payload.content,
        order=payload.order,
        duration=payload.duration,
    )
    return module_out(module)


# --- Publication workflow -------------------------------------------------


@router.post("/courses/{slug}/publish", response_model=CourseOut)
async def publish_course(slug: str, principal: CurrentUser, repos: RepoDep) -> CourseOut:
    return course_out(await course_service.submit_course(repos, principal, slug))


@router.patch("/courses/{slug}/status", response_model=CourseOut)
async def set_course_status(
    slug: str, payload: StatusIn, principal: AdminUser, repos: RepoDep
) -> CourseOut:
    course = await course_service.set_course_status(repos, principal, slug, payload.status)
    return course_out(course)


@router.post("/courses/{slug}/approve", response_model=CourseOut)
async def approve_course(slug: str, principal: AdminUser, repos: RepoDep) -> CourseOut:
    return course_out(await course_service.approve_course(repos, principal, slug))


@router.post("/courses/{slug}/deny", response_model=CourseOut)
async def deny_course(slug: str, principal: AdminUser, repos: RepoDep) -> CourseOut:
    return course_out(await course_service.deny_course(repos, principal, slug))


@router.post("/courses/{slug}/archive", response_model=CourseOut)
async def archive_course(slug: str, principal: AdminUser, repos: RepoDep) -> CourseOut:
    return course_out(await course_service.archive_course(repos, principal, slug))


@router.get("/author/courses", response_model=CourseListOut)
async def my_courses(
    principal: AuthorUser,
    repos: RepoDep,
    status: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> CourseListOut:
    size, skip = _page(limit, offset, AUTHOR_PAGE, AUTHOR_MAX)
    cards, total = await course_service.list_author_courses(
        repos, principal, status=_parse_status(status), limit=size, offset=skip
    )
    return CourseListOut(courses=[card_out(c) for c in cards], total=total)


# --- Reviews --------------------------------------------------------------


@router.get("/courses/{slug}/reviews", response_model=ReviewListOut)
async def list_reviews(slug: str, repos: RepoDep, principal: MaybeUser) -> ReviewListOut:
    summary = await review_service.list_reviews(repos, principal, slug)
    return ReviewListOut(
        reviews=[_review_out(r, u) for r, u in summary.reviews],
        averageRating=summary.average_rating,
        total=summary.total,
    )


@router.post("/courses/{slug}/reviews", response_model=ReviewOut)
async def submit_review(
    slug: str, payload: ReviewIn, principal: CurrentUser, repos: RepoDep
) -> ReviewOut:
    review, user = await review_service.upsert_review(
        repos, principal, slug, rating=payload.rating, comment=payload.comment
    )
    return _review_out(review, user)
