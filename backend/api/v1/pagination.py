"""Page/limit query parameters for list endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import Query

from core import settings
from db.pagination import page_offset, total_pages

MAX_PAGE_SIZE = 100

PageQuery = Annotated[int, Query(ge=1)]
LimitQuery = Annotated[int | None, Query(ge=1, le=MAX_PAGE_SIZE)]

__all__ = [
    "MAX_PAGE_SIZE",
    "LimitQuery",
    "PageQuery",
    "page_offset",
    "resolve_limit",
    "total_pages",
]


def resolve_limit(limit: int | None) -> int:
    return limit if limit is not None else settings.default_page_size
