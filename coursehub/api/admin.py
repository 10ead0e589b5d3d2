"""Admin-only dashboards, moderation lists, payouts and settings."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, status
from pydantic import BaseModel

from coursehub.api.dependencies import AdminUser, RepoDep
from coursehub.api.schemas import CourseOut, card_out
from coursehub.models.course import CourseStatus
from coursehub.services import (
    analytics_service,
    course_service,
    revenue_service,
    settings_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

COURSE_PAGE, COURSE_MAX = 50, 100


class CourseListOut(BaseModel):
    courses: list[CourseOut]
    total: int


class ActivityOut(BaseModel):
    type: str
    date: datetime
    id: str
    message: str
    meta: dict[str, Any]


class ActivityListOut(BaseModel):
    activities: list[ActivityOut]


class CourseRevenueOut(BaseModel):
    courseId: str
    title: str
    slug: str
    authorId: str
    authorName: str
    price: float
    enrollments: int
    revenue: float


class AuthorRevenueOut(BaseModel):
    authorId: str
    authorName: str
    earnings: float
    paidOut: float
    pending: float


class RevenueTotalsOut(BaseModel):
    platformRevenue: float
    totalPaidOut: float
    totalPending: float


class PayoutOut(BaseModel):
    id: str
    authorId: str
    authorName: str | None = None
    amount: float
    note: str | None
    status: str
    paidAt: datetime


class RevenueOut(BaseModel):
    revenueByCourse: list[CourseRevenueOut]
    revenueByAuthor: list[AuthorRevenueOut]
    totals: RevenueTotalsOut
    recentPayouts: list[PayoutOut]


class PayoutIn(BaseModel):
    authorId: UUID | None = None
    # validated by the service so bad values get its message
    amount: Any = None
    note: str | None = None


class StripeSettingsIn(BaseModel):
    stripePublishableKey: str | None = None
    stripeSecretKey: str | None = None
    stripeWebhookSecret: str | None = None


class StripeSettingsOut(BaseModel):
    stripePublishableKey: str
    stripeSecretKey: str
    stripeWebhookSecret: str
    configured: bool


@router.get("/courses", response_model=CourseListOut)
async def all_courses(
    _principal: AdminUser,
    repos: RepoDep,
    status: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> CourseListOut:
    try:
        status_filter = CourseStatus(status) if status else None
    except ValueError:
        status_filter = None
    size = COURSE_PAGE if not limit or limit < 1 else min(limit, COURSE_MAX)
    cards, total = await course_service.list_all_courses(
        repos, status=status_filter, limit=size, offset=max(offset or 0, 0)
    )
    return CourseListOut(courses=[card_out(c) for c in cards], total=total)


@router.get("/analytics")
async def analytics(_principal: AdminUser, repos: RepoDep, days: int | None = None) -> dict:
    return await analytics_service.platform_analytics(repos, days)


@router.get("/activity", response_model=ActivityListOut)
async def activity(
    _principal: AdminUser, repos: RepoDep, limit: int | None = None
) -> ActivityListOut:
    items = await analytics_service.activity_feed(repos, limit)
    return ActivityListOut(
        activities=[
            ActivityOut(type=a.type, date=a.date, id=a.id, message=a.message, meta=a.meta)
            for a in items
        ]
    )


@router.get("/revenue", response_model=RevenueOut)
async def revenue(principal: AdminUser, repos: RepoDep) -> RevenueOut:
    logger.info("Revenue report requested by user=%s", principal.user_id)
    report, recent = await revenue_service.revenue_report(repos)
    return RevenueOut(
        revenueByCourse=[
            CourseRevenueOut(
                courseId=str(r.course_id),
                title=r.title,
                slug=r.slug,
                authorId=str(r.author_id),
                authorName=r.author_name,
                price=float(r.price),
                enrollments=r.enrollments,
                revenue=float(r.revenue),
            )
            for r in report.by_course
        ],
        revenueByAuthor=[
            AuthorRevenueOut(
                authorId=str(a.author_id),
                authorName=a.author_name,
                earnings=float(a.earnings),
                paidOut=float(a.paid_out),
                pending=float(a.pending),
            )
            for a in report.by_author
        ],
        totals=RevenueTotalsOut(
            platformRevenue=float(report.platform_revenue),
            totalPaidOut=float(report.total_paid_out),
            totalPending=float(report.total_pending),
        ),
        recentPayouts=[
            PayoutOut(
                id=str(p.id),
                authorId=str(p.author_id),
                authorName=author.display_name if author else None,
                amount=float(p.amount),
                note=p.note,
                status=p.status,
                paidAt=p.paid_at,
            )
            for p, author in recent
        ],
    )


@router.post("/payouts", response_model=PayoutOut, status_code=status.HTTP_201_CREATED)
async def record_payout(payload: PayoutIn, principal: AdminUser, repos: RepoDep) -> PayoutOut:
    payout = await revenue_service.record_payout(
        repos, author_id=payload.authorId, amount=payload.amount, note=payload.note
    )
    logger.info("Payout %s recorded by admin=%s", payout.id, principal.user_id)
    return PayoutOut(
        id=str(payout.id),
        authorId=str(payout.author_id),
        amount=float(payout.amount),
        note=payout.note,
        status=payout.status,
        paidAt=payout.paid_at,
    )


@router.get("/settings/stripe", response_model=StripeSettingsOut)
async def get_stripe_settings(_principal: AdminUser, repos: RepoDep) -> StripeSettingsOut:
    return StripeSettingsOut(**await settings_service.stripe_settings(repos.settings))


@router.patch("/settings/stripe", response_model=StripeSettingsOut)
async def update_stripe_settings(
    payload: StripeSettingsIn, _principal: AdminUser, repos: RepoDep
) -> StripeSettingsOut:
    updated = await settings_service.update_stripe_settings(
        repos.settings,
        {
            settings_service.PUBLISHABLE_KEY: payload.stripePublishableKey,
            settings_service.SECRET_KEY: payload.stripeSecretKey,
            settings_service.WEBHOOK_SECRET: payload.stripeWebhookSecret,
        },
    )
    return StripeSettingsOut(**updated)
