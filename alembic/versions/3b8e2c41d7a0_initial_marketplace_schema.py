"""initial marketplace schema

Revision ID: 3b8e2c41d7a0
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "3b8e2c41d7a0"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _uuid(name: str, **kw) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), **kw)


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(
        name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _uuid("id", primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("role", sa.String(16), nullable=False),
        _timestamp("created_at"),
        sa.CheckConstraint(
            "role IN ('STUDENT', 'INSTRUCTOR', 'ADMIN')", name="ck_users_role"
        ),
    )
    op.create_table(
        "categories",
        _uuid("id", primary_key=True),
        sa.Column("name", sa.String(128), nullable=False, unique=True),
    )
    op.create_table(
        "courses",
        _uuid("id", primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("cover_image_url", sa.Text(), nullable=True),
        sa.Column("max_students", sa.Integer(), nullable=True),
        _uuid("instructor_id", sa.ForeignKey("users.id"), nullable=False),
        _uuid("category_id", sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        _timestamp("created_at"),
        sa.CheckConstraint("price >= 0", name="ck_courses_price"),
    )
    op.create_table(
        "modules",
        _uuid("id", primary_key=True),
        _uuid(
            "course_id",
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.UniqueConstraint("course_id", "order_index", name="uq_modules_course_order"),
    )
    op.create_table(
        "classes",
        _uuid("id", primary_key=True),
        _uuid(
            "module_id",
            sa.ForeignKey("modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("material_url", sa.Text(), nullable=True),
        sa.UniqueConstraint("module_id", "order_index", name="uq_classes_module_order"),
    )
    op.create_table(
        "cart_lines",
        _uuid("student_id", sa.ForeignKey("users.id", ondelete="CASCADE")),
        _uuid("course_id", sa.ForeignKey("courses.id", ondelete="CASCADE")),
        _timestamp("added_at"),
        sa.PrimaryKeyConstraint("student_id", "course_id", name="pk_cart_lines"),
    )
    op.create_table(
        "enrollments",
        _uuid("id", primary_key=True),
        _uuid("student_id", sa.ForeignKey("users.id"), nullable=False),
        _uuid("course_id", sa.ForeignKey("courses.id"), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("enrolled_at"),
        sa.Column("certificate_id", sa.String(32), nullable=True, unique=True),
        _timestamp("certificate_issued_at", nullable=True),
        sa.UniqueConstraint(
            "student_id", "course_id", name="uq_enrollments_student_course"
        ),
        sa.CheckConstraint(
            "progress BETWEEN 0 AND 100", name="ck_enrollments_progress"
        ),
    )
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])
    op.create_table(
        "class_completions",
        _uuid("student_id", sa.ForeignKey("users.id", ondelete="CASCADE")),
        _uuid("class_id", sa.ForeignKey("classes.id", ondelete="CASCADE")),
        _timestamp("completed_at"),
        sa.PrimaryKeyConstraint("student_id", "class_id", name="pk_class_completions"),
    )
    op.create_table(
        "reviews",
        _uuid("id", primary_key=True),
        _uuid("student_id", sa.ForeignKey("users.id"), nullable=False),
        _uuid(
            "course_id",
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint(
            "student_id", "course_id", name="uq_reviews_student_course"
        ),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
    )


def downgrade() -> None:
    op.drop_table("reviews")
    op.drop_table("class_completions")
    op.drop_index("ix_enrollments_course_id", table_name="enrollments")
    op.drop_table("enrollments")
    op.drop_table("cart_lines")
    op.drop_table("classes")
    op.drop_table("modules")
    op.drop_table("courses")
    op.drop_table("categories")
    op.drop_table("users")
