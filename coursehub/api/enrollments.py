from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, status
from pydantic import BaseModel

from coursehub.api.dependencies import CurrentUser, RepoDep
from coursehub.services import enrollment_service

router = APIRouter(tags=["enrollments"])


class EnrollIn(BaseModel):
    courseId: str | None = None


class EnrollmentOut(BaseModel):
    id: str
    userId: str
    courseId: str
    progress: int
    enrolledAt: datetime
    completedAt: datetime | None


class CourseSummaryOut(BaseModel):
    id: str
    title: str
    slug: str
    thumbnail: str | None
    category: str | None


class EnrollmentWithCourseOut(EnrollmentOut):
    course: CourseSummaryOut | None


class EnrollmentListOut(BaseModel):
    enrollments: list[EnrollmentWithCourseOut]


@router.post("/enroll", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
async def enroll(payload: EnrollIn, principal: CurrentUser, repos: RepoDep) -> EnrollmentOut:
    enrollment = await enrollment_service.enroll(repos, principal, payload.courseId)
    return EnrollmentOut(**enrollment_service.enrollment_body(enrollment))


@router.get("/enrollments", response_model=EnrollmentListOut)
async def my_enrollments(principal: CurrentUser, repos: RepoDep) -> EnrollmentListOut:
    rows = await enrollment_service.list_enrollments(repos, principal)
    return EnrollmentListOut(
        enrollments=[
            EnrollmentWithCourseOut(
                **enrollment_service.enrollment_body(e),
                course=CourseSummaryOut(
                    id=str(c.id),
                    title=c.title,
                    slug=c.slug,
                    thumbnail=c.thumbnail,
                    category=c.category,
                )
                if c is not None
                else None,
            )
            for e, c in rows
        ]
    )
