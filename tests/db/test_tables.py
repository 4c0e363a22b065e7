"""The relational schema declares the same uniqueness rules the
in-memory repositories enforce.  Checked against metadata and compiled
PostgreSQL DDL, so no database is needed.
"""

from __future__ import annotations

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

import learnhub.db.tables  # noqa: F401  registers tables on Base.metadata
from learnhub.db.engine import Base

_TABLES = Base.metadata.tables


def _constraint_names(table: str) -> set[str]:
    return {c.name for c in _TABLES[table].constraints if c.name}


def test_all_tables_registered() -> None:
    assert set(_TABLES) == {
        "users",
        "categories",
        "courses",
        "modules",
        "classes",
        "cart_lines",
        "enrollments",
        "class_completions",
        "reviews",
    }


_CONSTRAINTS = [
    ("users", "ck_users_role"),
    ("courses", "ck_courses_price"),
    ("modules", "uq_modules_course_order"),
    ("classes", "uq_classes_module_order"),
    ("cart_lines", "pk_cart_lines"),
    ("enrollments", "uq_enrollments_student_course"),
    ("enrollments", "ck_enrollments_progress"),
    ("class_completions", "pk_class_completions"),
    ("reviews", "uq_reviews_student_course"),
    ("reviews", "ck_reviews_rating"),
]


@pytest.mark.parametrize(
    "table,constraint", _CONSTRAINTS, ids=[c for _, c in _CONSTRAINTS]
)
def test_named_constraint_present(table: str, constraint: str) -> None:
    assert constraint in _constraint_names(table)


def test_unique_columns() -> None:
    assert _TABLES["users"].c.email.unique
    assert _TABLES["categories"].c.name.unique
    assert _TABLES["enrollments"].c.certificate_id.unique
    assert _TABLES["enrollments"].c.certificate_id.nullable


def test_composite_primary_keys() -> None:
    cart_pk = [c.name for c in _TABLES["cart_lines"].primary_key.columns]
    completion_pk = [c.name for c in _TABLES["class_completions"].primary_key.columns]
    assert cart_pk == ["student_id", "course_id"]
    assert completion_pk == ["student_id", "class_id"]


@pytest.mark.parametrize("table", sorted(_TABLES))
def test_postgres_ddl_compiles(table: str) -> None:
    ddl = str(CreateTable(_TABLES[table]).compile(dialect=postgresql.dialect()))
    assert f"CREATE TABLE {table} (" in ddl
