"""Typed SQL expression helpers for SQLModel columns."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy.sql import ColumnElement


def eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def ne(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column != value)


def in_(column: Any, values: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], cast(Any, column).in_(values))


def ilike(column: Any, pattern: str) -> ColumnElement[bool]:
    """Case-insensitive LIKE; callers escape ``%``/``_`` with a backslash."""
    return cast(ColumnElement[bool], cast(Any, column).ilike(pattern, escape="\\"))


def desc(column: Any) -> Any:
    return cast(Any, column).desc()


def asc(column: Any) -> Any:
    return cast(Any, column).asc()


def like_pattern(term: str) -> str:
    """Build a ``%term%`` substring pattern with LIKE wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
