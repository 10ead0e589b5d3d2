"""initial schema

Revision ID: 3b9d2e71c0a4
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b9d2e71c0a4"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _uuid(name: str, **kw) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), **kw)


def _ts(name: str, *, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(
        name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _uuid("id", primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("username", sa.String(length=64), nullable=True, unique=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="STUDENT"),
        _ts("created_at"),
    )

    op.create_table(
        "courses",
        _uuid("id", primary_key=True),
        _uuid("author_id", sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("long_description", sa.Text(), nullable=True),
        sa.Column("thumbnail", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=128), nullable=True),
        sa.Column("level", sa.String(length=16), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="DRAFT"),
        _ts("published_at", nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("ix_courses_author_id", "courses", ["author_id"])
    op.create_index("ix_courses_status", "courses", ["status"])

    op.create_table(
        "modules",
        _uuid("id", primary_key=True),
        _uuid(
            "course_id",
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "content",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("duration", sa.Integer(), nullable=True),
        _ts("created_at"),
    )
    op.create_index("ix_modules_course_order", "modules", ["course_id", "order"])

    op.create_table(
        "enrollments",
        _uuid("id", primary_key=True),
        _uuid("user_id", sa.ForeignKey("users.id"), nullable=False),
        _uuid(
            "course_id",
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        _ts("enrolled_at"),
        _ts("completed_at", nullable=True),
        sa.UniqueConstraint("user_id", "course_id"),
    )
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])

    op.create_table(
        "module_completions",
        _uuid("user_id", sa.ForeignKey("users.id"), primary_key=True),
        _uuid(
            "module_id",
            sa.ForeignKey("modules.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        _ts("completed_at"),
    )

    op.create_table(
        "reviews",
        _uuid("id", primary_key=True),
        _uuid(
            "course_id",
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _uuid("user_id", sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.UniqueConstraint("course_id", "user_id"),
    )

    op.create_table(
        "payouts",
        _uuid("id", primary_key=True),
        _uuid("author_id", sa.ForeignKey("users.id"), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column(
            "status", sa.String(length=16), nullable=False, server_default="completed"
        ),
        _ts("paid_at"),
    )
    op.create_index("ix_payouts_author_id", "payouts", ["author_id"])

    op.create_table(
        "settings",
        sa.Column("key", sa.String(length=128), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
    )

    op.create_table(
        "notifications",
        _uuid("id", primary_key=True),
        _uuid("user_id", sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("link", sa.Text(), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts("created_at"),
    )
    op.create_index(
        "ix_notifications_user_read", "notifications", ["user_id", "read"]
    )

    op.create_table(
        "password_reset_tokens",
        _uuid("id", primary_key=True),
        sa.Column("token_hash", sa.String(length=64), nullable=False, unique=True),
        _uuid("user_id", sa.ForeignKey("users.id"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used", sa.Boolean(), nullable=False, server_default=sa.false()),
    )


def downgrade() -> None:
    op.drop_table("password_reset_tokens")
    op.drop_index("ix_notifications_user_read", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("settings")
    op.drop_index("ix_payouts_author_id", table_name="payouts")
    op.drop_table("payouts")
    op.drop_table("reviews")
    op.drop_table("module_completions")
    op.drop_index("ix_enrollments_course_id", table_name="enrollments")
    op.drop_table("enrollments")
    op.drop_index("ix_modules_course_order", table_name="modules")
    op.drop_table("modules")
    op.drop_index("ix_courses_status", table_name="courses")
    op.drop_index("ix_courses_author_id", table_name="courses")
    op.drop_table("courses")
    op.drop_table("users")
